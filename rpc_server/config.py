"""Server configuration read from environment variables."""
import os
from typing import List, Optional

from pydantic import BaseModel, Field

TRUE_VALUES = {"1", "true", "yes", "on"}


def _split(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in TRUE_VALUES


class ServerSettings(BaseModel):
    """Settings for the RPC server and its HTTP app."""

    handlers: List[str] = Field(default_factory=list)
    blocked_methods: List[str] = Field(default_factory=list)
    auto_handle_errors: bool = False
    false_is_failure: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ServerSettings":
        return cls(
            handlers=_split(os.getenv("RPC_HANDLERS")),
            blocked_methods=_split(os.getenv("RPC_BLOCKED_METHODS")),
            auto_handle_errors=_flag(os.getenv("RPC_AUTO_HANDLE_ERRORS"), False),
            false_is_failure=_flag(os.getenv("RPC_FALSE_IS_FAILURE"), True),
            log_level=os.getenv("RPC_LOG_LEVEL", "INFO").upper(),
        )
