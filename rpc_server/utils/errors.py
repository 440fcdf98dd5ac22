"""Custom exception classes for the RPC server."""
from typing import Optional


class RPCServerError(Exception):
    """Base exception for RPC server errors."""

    pass


class InvalidArgumentError(RPCServerError, TypeError):
    """Raised when a registry API receives an argument of the wrong type."""

    pass


class BindError(RPCServerError):
    """Handler descriptor could not be turned into a handler instance."""

    pass


class EnvelopeParseError(RPCServerError):
    """Request body is not valid JSON."""

    pass


class DispatchError(RPCServerError):
    """Per-request failure that is reported as a JSON-RPC error response."""

    code = -32602
    default_message = "Internal error."

    def __init__(self, message: Optional[str] = None, code: Optional[int] = None):
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class InvalidRequestError(DispatchError):
    """Request object lacks a usable method."""

    code = -32600
    default_message = "Invalid Request"


class MethodNotFoundError(DispatchError):
    """Method is blocked, unknown, or its invocation failed."""

    code = -32601
    default_message = "Requested method is not defined."
