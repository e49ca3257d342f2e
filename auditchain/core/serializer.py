"""
Deterministic block rendering.

A block is rendered as UTF-8 text, one newline-terminated line per entry:

    Hash of previous block : <previous hash>
    Block created at <yyyy-MM-dd HH:mm:ss>
    <arrival millis>|<arrival formatted>|<source>|<document>|<revision>|<ordinal>
    ...

The digest line is appended afterwards by the hash chain linker. Absent event
attributes, and timestamps outside the range the platform can represent, render
as empty fields.
"""

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from auditchain.core.event import AuditEvent

PREVIOUS_HASH_PREFIX = "Hash of previous block : "
CREATED_AT_PREFIX = "Block created at "
FIELD_SEPARATOR = "|"
LINE_TERMINATOR = "\n"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
ENCODING = "utf-8"


def format_timestamp(epoch_millis: int, timezone: Optional[tzinfo] = None) -> str:
    """
    Format epoch millis with second precision.

    Args:
        epoch_millis: Milliseconds since the epoch
        timezone: Target time zone, or None for system local time

    Returns:
        Timestamp formatted as "yyyy-MM-dd HH:mm:ss", or "" when the moment lies
        outside the range the platform can represent
    """
    try:
        moment = datetime.fromtimestamp(epoch_millis // 1000, tz=timezone)
    except (ValueError, OverflowError, OSError):
        return ""
    return moment.strftime(TIMESTAMP_FORMAT)


class BlockSerializer:
    """Renders a batch of events plus chain metadata into block bytes."""

    def __init__(self, timezone: Optional[tzinfo] = None):
        self.timezone = timezone

    def render(self, previous_hash: str, created_at: int, events: Iterable[AuditEvent]) -> bytes:
        """
        Render the header and event lines of a block.

        Args:
            previous_hash: Content hash of the previous block ("root" for the first)
            created_at: Block creation time in epoch millis
            events: Drained events in arrival order

        Returns:
            UTF-8 encoded block content (without digest line)
        """
        lines = [
            PREVIOUS_HASH_PREFIX + previous_hash,
            CREATED_AT_PREFIX + format_timestamp(created_at, self.timezone)
        ]
        lines.extend(self.render_event(event) for event in events)
        return "".join(line + LINE_TERMINATOR for line in lines).encode(ENCODING)

    def render_event(self, event: AuditEvent) -> str:
        """Render one event as a pipe-separated line (without terminator)."""
        arrival = event.arrival_timestamp
        fields = [
            "" if arrival is None else str(arrival),
            "" if arrival is None else format_timestamp(arrival, self.timezone),
            event.source_id,
            event.document_id,
            event.document_revision,
            event.ordinal
        ]
        return FIELD_SEPARATOR.join("" if field is None else field for field in fields)
