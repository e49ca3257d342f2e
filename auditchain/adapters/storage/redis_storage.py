"""
Redis storage adapter for AuditChain

This module keeps the chain state in a Redis hash so that every node of a
cluster sees the same chain position. Conditional saves use WATCH/MULTI so a
second writer that advanced the chain in the meantime is detected.
"""

import logging
from typing import Mapping, Optional

import redis

from auditchain.adapters.storage.base import ConditionalStateStore
from auditchain.core.exceptions import StateLoadError, StateSaveError

logger = logging.getLogger(__name__)


class RedisStateStore(ConditionalStateStore):
    """Redis-hash chain state store"""

    STATE_PREFIX = "auditchain:state:"

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 password: str = None, scope: str = "default",
                 client: Optional[redis.Redis] = None, **kwargs):
        """
        Initialize Redis state store

        Args:
            host: Redis server host
            port: Redis server port
            db: Redis database number
            password: Redis password (if required)
            scope: Name separating independent chains in the same database
            client: Pre-built client (host/port/db are ignored when given)
            **kwargs: Additional Redis connection parameters
        """
        self.scope = scope
        self.state_key = f"{self.STATE_PREFIX}{scope}"

        if client is not None:
            self.redis_client = client
            return

        connection_params = {
            'host': host,
            'port': port,
            'db': db,
            'decode_responses': True,
            **kwargs
        }
        if password:
            connection_params['password'] = password

        try:
            self.redis_client = redis.Redis(**connection_params)
            self.redis_client.ping()
            logger.info(f"Connected to Redis at {host}:{port}")
        except redis.RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    def get(self) -> Optional[dict[str, str]]:
        try:
            stored = self.redis_client.hgetall(self.state_key)
        except redis.RedisError as e:
            logger.error(f"Failed to read chain state {self.state_key}: {e}")
            raise StateLoadError(f"Cannot read chain state from Redis: {e}") from e
        return _decode(stored) or None

    def set(self, mapping: Mapping[str, str]) -> None:
        try:
            self.redis_client.hset(self.state_key, mapping=dict(mapping))
        except redis.RedisError as e:
            logger.error(f"Failed to write chain state {self.state_key}: {e}")
            raise StateSaveError(f"Cannot write chain state to Redis: {e}") from e

    def compare_and_set(self, expected: Optional[Mapping[str, str]], mapping: Mapping[str, str]) -> bool:
        expected_map = dict(expected) if expected else {}
        try:
            with self.redis_client.pipeline() as pipe:
                pipe.watch(self.state_key)
                current = _decode(pipe.hgetall(self.state_key))
                if current != expected_map:
                    pipe.unwatch()
                    logger.warning(f"Chain state {self.state_key} changed since it was read")
                    return False
                pipe.multi()
                pipe.hset(self.state_key, mapping=dict(mapping))
                pipe.execute()
                return True
        except redis.WatchError:
            logger.warning(f"Chain state {self.state_key} modified during conditional save")
            return False
        except redis.RedisError as e:
            logger.error(f"Failed to write chain state {self.state_key}: {e}")
            raise StateSaveError(f"Cannot write chain state to Redis: {e}") from e

    def close(self) -> None:
        self.redis_client.close()


def _decode(stored) -> dict[str, str]:
    """Normalise a HGETALL reply, which holds bytes unless decode_responses is set."""
    return {
        (k.decode() if isinstance(k, bytes) else k): (v.decode() if isinstance(v, bytes) else v)
        for k, v in (stored or {}).items()
    }
