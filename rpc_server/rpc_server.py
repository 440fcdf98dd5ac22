"""RPC server: binds handler objects and answers JSON-RPC exchanges."""
import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Union

from .jsonrpc.blocklist import MethodBlocklist
from .jsonrpc.envelope import normalize_envelope
from .jsonrpc.handler import JSONRPCHandler, aggregate_responses
from .jsonrpc.models import (
    CORS_HEADERS,
    JSON_CONTENT_TYPE,
    TransportDirective,
    TransportRejection,
)
from .jsonrpc.registry import UNSET, HandlerRegistry
from .jsonrpc.transport import TransportStatus, check_transport
from .utils.errors import EnvelopeParseError

logger = logging.getLogger(__name__)

Payload = Union[Dict[str, Any], List[Dict[str, Any]]]


@dataclass
class ExchangeResult:
    """What the HTTP layer should emit for one exchange.

    ``handled`` is False when the body was empty, or when the exchange was
    rejected and error handling was left to the caller.
    """

    handled: bool
    status_code: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    payload: Optional[Payload] = None
    rejection: Optional[TransportRejection] = None

    @property
    def body(self) -> Optional[str]:
        if self.payload is None:
            return None
        return json.dumps(self.payload)


class RPCServer:
    """Serves the methods of bound handler objects over JSON-RPC.

    Handlers are resolved in the order they were bound; the first one that
    exposes the requested method serves it.

    Usage::

        server = RPCServer()
        server.bind(Calculator())
        server.bind({"type": "myapp.handlers:Store", "path": "/tmp/store"})
        result = server.listen(body, "POST", "application/json")
    """

    def __init__(self, false_is_failure: bool = True):
        self.registry = HandlerRegistry()
        self.blocklist = MethodBlocklist()
        self.jsonrpc_handler = JSONRPCHandler(
            self.registry, self.blocklist, false_is_failure=false_is_failure
        )
        self._last_error: Optional[TransportRejection] = None
        self._lock = threading.Lock()

    # Registry

    def bind(self, descriptor: Any) -> bool:
        """Bind a handler object; see ``HandlerRegistry.bind``."""
        return self.registry.bind(descriptor)

    def handles(self, descriptors: Any = UNSET) -> Dict[str, Any]:
        return self.registry.set_all(descriptors)

    def register_type(self, cls: type, name: Optional[str] = None) -> None:
        self.registry.register_type(cls, name)

    # Blocklist

    def block(self, name: str) -> Set[str]:
        return self.blocklist.block(name)

    def unblock(self, name: str) -> Set[str]:
        return self.blocklist.unblock(name)

    def is_blocked(self, name: str) -> bool:
        return self.blocklist.is_blocked(name)

    # Errors

    @property
    def last_error(self) -> Optional[TransportRejection]:
        with self._lock:
            return self._last_error

    def get_error_message(self) -> str:
        """JSON error descriptor of the last rejected exchange, or ""."""
        rejection = self.last_error
        if rejection is None:
            return ""
        return json.dumps(rejection.to_response().to_payload())

    def handle_error(self) -> Optional[TransportDirective]:
        """Directive for the last rejected exchange, or None if there was none."""
        rejection = self.last_error
        if rejection is None:
            return None
        return rejection.directive

    # Exchange

    def listen(
        self,
        body: Optional[str],
        http_method: Optional[str],
        content_type: Optional[str],
        auto_handle_errors: bool = False,
    ) -> ExchangeResult:
        """Process one exchange and describe the response to emit.

        Args:
            body: Raw request body
            http_method: HTTP request method, must be exactly "POST"
            content_type: Content-Type header, must start with
                "application/json" (case-insensitive)
            auto_handle_errors: If True a rejected exchange is reported as
                handled with the rejection's status and headers; otherwise
                the caller reads ``get_error_message()`` / ``handle_error()``

        Returns:
            ExchangeResult with status, headers and the payload (a single
            response object, an array of them, or None)
        """
        with self._lock:
            self._last_error = None

        check = check_transport(body, http_method, content_type)

        if check.status is TransportStatus.NOT_HANDLED:
            return ExchangeResult(handled=False)

        if check.status is TransportStatus.REJECTED:
            rejection = check.rejection
            with self._lock:
                self._last_error = rejection
            if auto_handle_errors:
                return ExchangeResult(
                    handled=True,
                    status_code=rejection.directive.status_code,
                    headers=dict(rejection.directive.headers),
                    rejection=rejection,
                )
            return ExchangeResult(handled=False, rejection=rejection)

        headers = dict(CORS_HEADERS)
        try:
            candidates = normalize_envelope(body)
        except EnvelopeParseError as e:
            logger.warning(f"Ignoring unparseable request: {e}")
            return ExchangeResult(handled=True, headers=headers)

        responses = self.jsonrpc_handler.dispatch_all(candidates, body)
        payload = aggregate_responses(responses)
        if payload is not None:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        logger.debug(
            f"Dispatched {len(candidates)} request(s), {len(responses)} response(s)"
        )
        return ExchangeResult(handled=True, headers=headers, payload=payload)
