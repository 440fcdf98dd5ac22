"""FastAPI server exposing bound handler objects over JSON-RPC."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from .config import ServerSettings
from .http_transport import HTTPTransport
from .rpc_server import RPCServer

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_NAME = "json-rpc-server"
VERSION = "1.0.0"

RPC_PATHS = ["/", "/rpc", "/jsonrpc"]
# Every method is routed so that the precondition check, not the router,
# answers non-POST requests.
RPC_HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def configure_server(rpc_server: RPCServer, settings: ServerSettings) -> None:
    """Bind configured handlers and block configured methods."""
    for descriptor in settings.handlers:
        if not rpc_server.bind(descriptor):
            logger.warning(f"Configured handler could not be bound: {descriptor}")
    for name in settings.blocked_methods:
        rpc_server.block(name)


def create_app(
    settings: Optional[ServerSettings] = None,
    rpc_server: Optional[RPCServer] = None,
) -> FastAPI:
    """Build the FastAPI app around an RPC server instance."""
    settings = settings or ServerSettings.from_env()
    rpc_server = rpc_server or RPCServer(false_is_failure=settings.false_is_failure)
    transport = HTTPTransport(rpc_server, auto_handle_errors=settings.auto_handle_errors)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle manager for FastAPI app."""
        logging.getLogger().setLevel(settings.log_level)
        logger.info("Starting JSON-RPC server...")
        configure_server(rpc_server, settings)
        logger.info(f"Bound {len(rpc_server.registry)} handlers")
        logger.info(f"Blocked {len(rpc_server.blocklist)} methods")
        yield
        logger.info("Shutting down JSON-RPC server...")

    app = FastAPI(
        title="JSON-RPC Server",
        description="Serves methods of bound handler objects over JSON-RPC on HTTP POST",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.rpc_server = rpc_server
    app.state.settings = settings

    async def jsonrpc_endpoint(request: Request):
        """JSON-RPC endpoint for single and batched requests."""
        return await transport.handle_request(request)

    for path in RPC_PATHS:
        app.add_api_route(path, jsonrpc_endpoint, methods=RPC_HTTP_METHODS)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "handlers": list(rpc_server.handles()),
            "blocked_methods": sorted(rpc_server.blocklist.names()),
        }

    return app


app = create_app()
