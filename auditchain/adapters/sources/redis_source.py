"""
Redis list event source.

Producers RPUSH JSON-encoded attribute maps onto a list; the block controller
uses LLEN as the pending count and LPOP to take events one at a time, so
arrival order is preserved.
"""

import json
import logging
from typing import Any, Mapping, Optional, Union

import redis

from auditchain.adapters.sources.base import EventSource
from auditchain.core.event import AuditEvent
from auditchain.core.exceptions import EventSourceError
from auditchain.security.secure_logging import sanitize_for_log

logger = logging.getLogger(__name__)


class RedisListEventSource(EventSource):
    """Event source draining a Redis list"""

    def __init__(self, client: redis.Redis, key: str = "auditchain:events"):
        """
        Args:
            client: Redis client
            key: List key events are pushed onto
        """
        self.redis_client = client
        self.key = key

    def push(self, event: Union[AuditEvent, Mapping[str, Any]]) -> None:
        """Append an event to the list (producer side)."""
        attributes = event.to_attributes() if isinstance(event, AuditEvent) else dict(event)
        try:
            self.redis_client.rpush(self.key, json.dumps(attributes, sort_keys=True))
        except redis.RedisError as e:
            raise EventSourceError(f"Cannot push event to {self.key}: {e}") from e

    def pending_count(self) -> int:
        try:
            return int(self.redis_client.llen(self.key))
        except redis.RedisError as e:
            raise EventSourceError(f"Cannot read length of {self.key}: {e}") from e

    def poll(self) -> Optional[AuditEvent]:
        try:
            raw = self.redis_client.lpop(self.key)
        except redis.RedisError as e:
            raise EventSourceError(f"Cannot pop event from {self.key}: {e}") from e

        if raw is None:
            return None
        try:
            attributes = json.loads(raw)
            if not isinstance(attributes, dict):
                raise ValueError("event is not a JSON object")
            return AuditEvent.from_attributes(attributes)
        except ValueError as e:
            logger.error(f"Undecodable event on {self.key}: {sanitize_for_log(raw)}")
            raise EventSourceError(f"Undecodable event on {self.key}: {e}") from e
