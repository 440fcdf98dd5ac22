"""Method names that may never be dispatched."""
import logging
import threading
from typing import Set

logger = logging.getLogger(__name__)


class MethodBlocklist:
    """Case-sensitive set of blocked method names."""

    def __init__(self):
        self._names: Set[str] = set()
        self._lock = threading.RLock()

    def block(self, name: str) -> Set[str]:
        with self._lock:
            if name not in self._names:
                self._names.add(name)
                logger.info(f"Blocked method: {name}")
            return set(self._names)

    def unblock(self, name: str) -> Set[str]:
        with self._lock:
            if name in self._names:
                self._names.discard(name)
                logger.info(f"Unblocked method: {name}")
            return set(self._names)

    def is_blocked(self, name: str) -> bool:
        with self._lock:
            return name in self._names

    def names(self) -> Set[str]:
        with self._lock:
            return set(self._names)

    def __contains__(self, name: str) -> bool:
        return self.is_blocked(name)

    def __len__(self) -> int:
        return len(self._names)
