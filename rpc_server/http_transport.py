"""HTTP transport: connects FastAPI requests to the RPC server."""
import json
import logging

from fastapi import Request, Response
from starlette.concurrency import run_in_threadpool

from .rpc_server import ExchangeResult, RPCServer

logger = logging.getLogger(__name__)


class HTTPTransport:
    """Reads an HTTP exchange, runs it through the RPC server, writes the result."""

    def __init__(self, rpc_server: RPCServer, auto_handle_errors: bool = False):
        self.rpc_server = rpc_server
        self.auto_handle_errors = auto_handle_errors

    async def handle_request(self, request: Request) -> Response:
        raw = await request.body()
        body = raw.decode("utf-8", errors="replace")
        content_type = request.headers.get("Content-Type", "")

        # Handler methods are synchronous; keep them off the event loop.
        result = await run_in_threadpool(
            self.rpc_server.listen,
            body,
            request.method,
            content_type,
            auto_handle_errors=self.auto_handle_errors,
        )
        return self.build_response(result)

    def build_response(self, result: ExchangeResult) -> Response:
        """Turn an ExchangeResult into a FastAPI response."""
        if result.rejection is not None and not result.handled:
            # Auto-handling is off, so this layer decides: send the error
            # descriptor along with the directive's status and headers.
            directive = result.rejection.directive
            return Response(
                content=json.dumps(result.rejection.to_response().to_payload()),
                status_code=directive.status_code,
                media_type="application/json",
                headers=directive.headers,
            )

        if not result.handled:
            return Response(status_code=200)

        headers = dict(result.headers)
        body = result.body
        if body is None:
            return Response(status_code=result.status_code, headers=headers)

        content_type = headers.pop("Content-Type", None)
        return Response(
            content=body,
            status_code=result.status_code,
            media_type=content_type,
            headers=headers,
        )
