"""JSON-RPC 2.0 request handler."""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from .blocklist import MethodBlocklist
from .models import JSONRPCError, JSONRPCRequest, JSONRPCResponse, ErrorCode
from .registry import HandlerEntry, HandlerRegistry
from ..utils.errors import DispatchError, InvalidRequestError, MethodNotFoundError

logger = logging.getLogger(__name__)

BLOCKED_MESSAGE = "The requested function does not exist."
UNDEFINED_MESSAGE = "Requested method is not defined."
INVOCATION_FAILED_MESSAGE = "Unknown method or invalid parameters."


class InvocationStatus(enum.Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVOCATION_ERROR = "invocation_error"


@dataclass
class Invocation:
    """Tagged result of calling a handler method."""

    status: InvocationStatus
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.status is InvocationStatus.OK


def invoke(entry: HandlerEntry, method_name: str, params: Any) -> Invocation:
    """Call ``method_name`` on the handler without letting errors escape."""
    if not entry.exposes(method_name):
        return Invocation(InvocationStatus.NOT_FOUND)

    try:
        method = getattr(entry.instance, method_name)
        if isinstance(params, dict):
            value = method(**params)
        else:
            value = method(*(params or []))
    except Exception as e:
        logger.debug(f"Invocation of {entry.key}.{method_name} failed: {e!r}")
        return Invocation(InvocationStatus.INVOCATION_ERROR, error=e)

    return Invocation(InvocationStatus.OK, value=value)


class JSONRPCHandler:
    """Resolves requests against the bound handlers and builds responses."""

    def __init__(
        self,
        registry: HandlerRegistry,
        blocklist: MethodBlocklist,
        false_is_failure: bool = True,
    ):
        self.registry = registry
        self.blocklist = blocklist
        self.false_is_failure = false_is_failure

    def parse_candidate(self, candidate: Any) -> JSONRPCRequest:
        if not isinstance(candidate, dict):
            raise InvalidRequestError()
        try:
            return JSONRPCRequest.model_validate(candidate)
        except ValidationError as e:
            raise InvalidRequestError() from e

    def resolve(self, method_name: str) -> HandlerEntry:
        if self.blocklist.is_blocked(method_name):
            raise MethodNotFoundError(BLOCKED_MESSAGE)
        entry = self.registry.find(method_name)
        if entry is None:
            raise MethodNotFoundError(UNDEFINED_MESSAGE)
        return entry

    def handle_request(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """Handle one validated request and return its response."""
        if not request.method:
            raise InvalidRequestError()

        entry = self.resolve(request.method)
        invocation = invoke(entry, request.method, request.params)

        if invocation.ok and not (self.false_is_failure and invocation.value is False):
            # Encoded here so an unserializable result fails only this request.
            return JSONRPCResponse(id=request.id, result=jsonable_encoder(invocation.value))

        if invocation.status is InvocationStatus.NOT_FOUND:
            raise MethodNotFoundError(UNDEFINED_MESSAGE)
        raise MethodNotFoundError(INVOCATION_FAILED_MESSAGE)

    def dispatch(self, candidate: Any, raw_body: str) -> Optional[JSONRPCResponse]:
        """Build the response for one candidate, or None for a notification.

        Failures never escape; each is turned into an error response whose
        ``data.request`` carries the raw body. A result that cannot be
        encoded as JSON is reported as an internal error.

        Args:
            candidate: One request taken from the envelope, any JSON value
            raw_body: The request body as received

        Returns:
            JSONRPCResponse, or None when the candidate has no truthy ``id``
        """
        request_id = candidate.get("id") if isinstance(candidate, dict) else None
        method = candidate.get("method") if isinstance(candidate, dict) else None

        try:
            request = self.parse_candidate(candidate)
            response = self.handle_request(request)
        except DispatchError as e:
            logger.debug(f"Request {request_id!r} ({method!r}) failed: {e.code} {e.message}")
            response = self.error_response(request_id, e.code, e.message, raw_body)
        except Exception as e:
            logger.error(f"Internal error handling {method!r}: {e}", exc_info=True)
            response = self.error_response(
                request_id, ErrorCode.INVALID_PARAMS, DispatchError.default_message, raw_body
            )

        if not request_id:
            return None
        return response

    def dispatch_all(self, candidates: Iterable[Any], raw_body: str) -> List[JSONRPCResponse]:
        """Dispatch every candidate in order, dropping notification responses."""
        responses = []
        for candidate in candidates:
            response = self.dispatch(candidate, raw_body)
            if response is not None:
                responses.append(response)
        return responses

    @staticmethod
    def error_response(request_id: Any, code: int, message: str, raw_body: str) -> JSONRPCResponse:
        return JSONRPCResponse(
            id=request_id,
            error=JSONRPCError(code=code, message=message, data={"request": raw_body}),
        )


def aggregate_responses(
    responses: List[JSONRPCResponse],
) -> Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]:
    """Collapse per-request responses into the payload to emit.

    No responses gives None, one gives a single object, two or more give
    an array in request order.
    """
    if not responses:
        return None
    if len(responses) == 1:
        return responses[0].to_payload()
    return [response.to_payload() for response in responses]
