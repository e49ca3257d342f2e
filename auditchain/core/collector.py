"""
Batch collection: drains the pending events of one invocation.
"""

import logging

from auditchain.adapters.sources.base import EventSource
from auditchain.core.event import AuditEvent
from auditchain.security.secure_logging import sanitize_for_log

logger = logging.getLogger(__name__)


def drain(source: EventSource) -> list[AuditEvent]:
    """
    Take every available event from the source, in arrival order.

    Events are neither reordered nor deduplicated. Transport failures raised by
    the source propagate to the caller.

    Args:
        source: Event source to drain

    Returns:
        Drained events (possibly empty)
    """
    events: list[AuditEvent] = []
    event = source.poll()
    while event is not None:
        if event.has_malformed_token:
            logger.warning(
                f"Sequence token without separator, using it whole: "
                f"{sanitize_for_log(event.sequence_token)}"
            )
        events.append(event)
        event = source.poll()

    logger.debug(f"Drained {len(events)} events")
    return events
