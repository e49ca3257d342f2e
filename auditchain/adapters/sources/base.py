"""
Event source interface.

An event source is the queue-like transport the block controller drains. It
offers an approximate pending count, used by the size trigger, and a
non-blocking take.
"""

from abc import ABC, abstractmethod
from typing import Optional

from auditchain.core.event import AuditEvent


class EventSource(ABC):
    """Queue-like source of audit events"""

    @abstractmethod
    def pending_count(self) -> int:
        """Return the approximate number of events waiting."""

    @abstractmethod
    def poll(self) -> Optional[AuditEvent]:
        """Take the next event without blocking, or return None if the source is empty."""
