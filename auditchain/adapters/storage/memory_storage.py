"""
In-memory chain state store.

Keeps the chain state for the lifetime of the process; suited to tests and to
single-process deployments that can afford to restart the chain.
"""

import threading
from typing import Mapping, Optional

from auditchain.adapters.storage.base import ConditionalStateStore


class MemoryStateStore(ConditionalStateStore):
    """Process-local chain state store"""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._state: Optional[dict[str, str]] = dict(initial) if initial is not None else None
        self._lock = threading.Lock()
        self.writes = 0

    def get(self) -> Optional[dict[str, str]]:
        with self._lock:
            return dict(self._state) if self._state is not None else None

    def set(self, mapping: Mapping[str, str]) -> None:
        with self._lock:
            self._state = dict(mapping)
            self.writes += 1

    def compare_and_set(self, expected: Optional[Mapping[str, str]], mapping: Mapping[str, str]) -> bool:
        with self._lock:
            current = self._state
            if (current is None) != (expected is None) or (current is not None and current != dict(expected)):
                return False
            self._state = dict(mapping)
            self.writes += 1
            return True
