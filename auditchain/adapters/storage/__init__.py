"""
Chain state store adapters.

`create_state_store` builds a store from the storage configuration returned by
`Settings.get_storage_config()`.
"""

from typing import Any, Dict

from auditchain.adapters.storage.base import ChainStateStore, ConditionalStateStore
from auditchain.adapters.storage.memory_storage import MemoryStateStore
from auditchain.adapters.storage.file_storage import FileStateStore
from auditchain.core.exceptions import ConfigurationError


def create_state_store(config: Dict[str, Any]) -> ChainStateStore:
    """
    Create the chain state store named by `config["backend"]`.

    Args:
        config: Storage configuration dictionary

    Returns:
        Chain state store instance
    """
    backend = config.get("backend", "file")
    scope = config.get("scope", "default")

    if backend == "memory":
        return MemoryStateStore()
    if backend == "file":
        return FileStateStore(config.get("state_file", "data/chain_state.json"))
    if backend == "redis":
        from auditchain.adapters.storage.redis_storage import RedisStateStore
        return RedisStateStore(scope=scope, **config.get("redis", {}))
    if backend == "sql":
        from auditchain.adapters.storage.sql_storage import SqlStateStore
        return SqlStateStore(config.get("database_url", "sqlite:///auditchain.db"), scope=scope)

    raise ConfigurationError(f"Unknown state backend '{backend}'")


__all__ = [
    'ChainStateStore',
    'ConditionalStateStore',
    'MemoryStateStore',
    'FileStateStore',
    'create_state_store'
]
