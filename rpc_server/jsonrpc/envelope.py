"""Request envelope parsing: single request or batch."""
import json
from typing import Any, List

from ..utils.errors import EnvelopeParseError


def parse_body(body: str) -> Any:
    try:
        return json.loads(body)
    except (TypeError, ValueError) as e:
        raise EnvelopeParseError(f"Request body is not valid JSON: {e}") from e


def normalize_envelope(body: str) -> List[Any]:
    """Return the request candidates contained in the body.

    A JSON array is a batch. A JSON object is a single request when it has
    a ``method`` key, otherwise each of its values is a candidate. Any
    other JSON value is a single (invalid) candidate.
    """
    parsed = parse_body(body)
    if isinstance(parsed, list):
        return list(parsed)
    if isinstance(parsed, dict) and "method" not in parsed:
        return list(parsed.values())
    return [parsed]
