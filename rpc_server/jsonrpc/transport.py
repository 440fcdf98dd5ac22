"""Transport precondition check for incoming exchanges."""
import enum
import logging
from dataclasses import dataclass
from typing import Optional

from .models import TransportDirective, TransportRejection

logger = logging.getLogger(__name__)

ALLOWED_METHOD = "POST"
ALLOWED_CONTENT_TYPE = "application/json"


class TransportStatus(enum.Enum):
    NOT_HANDLED = "not_handled"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


@dataclass
class TransportCheck:
    """Outcome of ``check_transport``; ``rejection`` is set only when REJECTED."""

    status: TransportStatus
    rejection: Optional[TransportRejection] = None

    @property
    def accepted(self) -> bool:
        return self.status is TransportStatus.ACCEPTED


def content_type_ok(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith(ALLOWED_CONTENT_TYPE)


def check_transport(
    body: Optional[str], http_method: Optional[str], content_type: Optional[str]
) -> TransportCheck:
    """Decide whether an exchange is eligible for RPC processing.

    An empty body is not an error, there is simply nothing to process.
    When both the content type and the method are wrong, the content type
    failure determines the message and the directive; ``received`` and
    ``allowed`` record every failed check.
    """
    if not body:
        return TransportCheck(TransportStatus.NOT_HANDLED)

    bad_content_type = not content_type_ok(content_type)
    bad_method = http_method != ALLOWED_METHOD
    if not (bad_content_type or bad_method):
        return TransportCheck(TransportStatus.ACCEPTED)

    allowed = {}
    received = {}
    message = ""
    directive = None

    if bad_content_type:
        message = "Invalid content type."
        received["CONTENT_TYPE"] = content_type or ""
        allowed["CONTENT_TYPE"] = ALLOWED_CONTENT_TYPE
        directive = TransportDirective(status_code=400)
    if bad_method:
        received["REQUEST_METHOD"] = http_method or ""
        allowed["REQUEST_METHOD"] = ALLOWED_METHOD
        if directive is None:
            message = f"Method [{http_method}] not allowed."
            directive = TransportDirective(
                status_code=405,
                headers={"Access-Control-Allow-Methods": ALLOWED_METHOD},
            )

    logger.warning(f"Rejected exchange: {message} received={received}")
    rejection = TransportRejection(
        message=message,
        allowed=allowed,
        received=received,
        request=body,
        directive=directive,
    )
    return TransportCheck(TransportStatus.REJECTED, rejection)
