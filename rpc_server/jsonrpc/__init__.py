"""JSON-RPC 2.0 dispatch over bound handler objects."""
from .models import JSONRPCRequest, JSONRPCResponse, JSONRPCError, ErrorCode
from .handler import JSONRPCHandler, aggregate_responses
from .registry import HandlerEntry, HandlerRegistry
from .blocklist import MethodBlocklist

__all__ = [
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCError",
    "ErrorCode",
    "JSONRPCHandler",
    "aggregate_responses",
    "HandlerEntry",
    "HandlerRegistry",
    "MethodBlocklist",
]
