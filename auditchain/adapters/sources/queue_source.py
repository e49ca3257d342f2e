"""
In-process event source backed by a thread-safe queue.

Producers put `AuditEvent` objects or attribute maps on the queue; the block
controller drains it. `from_jsonl` loads a spool file with one JSON attribute
map per line, which is how the CLI feeds events recorded elsewhere.
"""

import json
import logging
from pathlib import Path
from queue import Queue, Empty
from typing import Any, Mapping, Optional, Union

from auditchain.adapters.sources.base import EventSource
from auditchain.core.event import AuditEvent
from auditchain.core.exceptions import EventSourceError
from auditchain.security.secure_logging import sanitize_for_log

logger = logging.getLogger(__name__)


class QueueEventSource(EventSource):
    """Event source draining a `queue.Queue`"""

    def __init__(self, queue: Optional[Queue] = None):
        self.queue: Queue = queue if queue is not None else Queue()

    def offer(self, event: Union[AuditEvent, Mapping[str, Any]]) -> None:
        """Enqueue an event or an attribute map."""
        self.queue.put(event)

    def pending_count(self) -> int:
        return self.queue.qsize()

    def poll(self) -> Optional[AuditEvent]:
        try:
            item = self.queue.get_nowait()
        except Empty:
            return None

        if isinstance(item, AuditEvent):
            return item
        try:
            return AuditEvent.from_attributes(item)
        except (AttributeError, TypeError, ValueError) as e:
            logger.error(f"Undecodable queued event {sanitize_for_log(item)}: {e}")
            raise EventSourceError(f"Undecodable queued event: {e}") from e

    @classmethod
    def from_jsonl(cls, path: str) -> "QueueEventSource":
        """
        Load events from a JSON-lines file, one attribute map per line.

        Blank lines are skipped.

        Raises:
            EventSourceError: If the file cannot be read or a line is not a JSON object
        """
        source = cls()
        try:
            with open(Path(path), "r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, start=1):
                    if not line.strip():
                        continue
                    attributes = json.loads(line)
                    if not isinstance(attributes, dict):
                        raise EventSourceError(f"{path}:{line_number} is not a JSON object")
                    source.offer(AuditEvent.from_attributes(attributes))
        except OSError as e:
            raise EventSourceError(f"Cannot read events from {path}: {e}") from e
        except ValueError as e:
            raise EventSourceError(f"Invalid event in {path}: {e}") from e

        logger.info(f"Loaded {source.pending_count()} events from {path}")
        return source
