"""JSON-RPC 2.0 request/response models."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class JSONRPCRequest(BaseModel):
    """One request candidate taken from the envelope.

    ``method`` defaults to an empty string so that a request without a
    method still validates and can be answered with INVALID_REQUEST.
    """

    model_config = ConfigDict(extra="ignore")

    method: str = ""
    params: Optional[Union[List[Any], Dict[str, Any]]] = None
    id: Any = None

    @property
    def is_notification(self) -> bool:
        return not self.id


class JSONRPCError(BaseModel):
    """JSON-RPC 2.0 error model."""

    code: int
    message: str
    data: Optional[Any] = None


class JSONRPCResponse(BaseModel):
    """JSON-RPC 2.0 response model."""

    jsonrpc: Literal["2.0"] = "2.0"
    id: Any = None
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with ``id`` always present and exactly one of result/error."""
        payload: Dict[str, Any] = {"id": self.id, "jsonrpc": self.jsonrpc}
        if self.error is not None:
            payload["error"] = self.error.model_dump()
        else:
            payload["result"] = self.result
        return payload


class ErrorCode:
    """JSON-RPC 2.0 standard error codes and custom application codes."""

    # Standard JSON-RPC 2.0 error codes
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Custom application error codes
    TRANSPORT_REJECTED = -32400


CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST",
}

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


@dataclass
class TransportDirective:
    """Status code and headers the HTTP layer should emit."""

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)


class TransportRejection(BaseModel):
    """Structured description of an exchange that failed the transport check."""

    code: int = ErrorCode.TRANSPORT_REJECTED
    message: str
    allowed: Dict[str, str] = Field(default_factory=dict)
    received: Dict[str, str] = Field(default_factory=dict)
    request: str = ""
    directive: TransportDirective = Field(exclude=True)

    def to_response(self) -> JSONRPCResponse:
        return JSONRPCResponse(
            id=None,
            error=JSONRPCError(
                code=self.code,
                message=self.message,
                data={
                    "allowed": self.allowed,
                    "received": self.received,
                    "request": self.request,
                },
            ),
        )
