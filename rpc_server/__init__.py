"""JSON-RPC server for bound handler objects."""
from .rpc_server import ExchangeResult, RPCServer

__all__ = ["ExchangeResult", "RPCServer"]
