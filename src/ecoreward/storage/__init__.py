"""
State stores for EcoReward.

Provides the abstract state interface and its memory and Redis backends.
"""

from typing import Optional

from ecoreward.exceptions import StorageError

from .provider import AbstractStateStore, StagedWrite, StorageConfig
from .memory_provider import MemoryStateStore
from .redis_provider import RedisStateStore
from .unit_of_work import UnitOfWork


def create_state_store(config: Optional[StorageConfig] = None) -> AbstractStateStore:
    """Build (but do not connect) the store selected by ``config.backend``."""
    config = config or StorageConfig()
    if config.backend == "memory":
        return MemoryStateStore(config)
    if config.backend == "redis":
        return RedisStateStore(config)
    raise StorageError(f"Unknown storage backend '{config.backend}'")


__all__ = [
    "AbstractStateStore",
    "StagedWrite",
    "StorageConfig",
    "MemoryStateStore",
    "RedisStateStore",
    "UnitOfWork",
    "create_state_store",
]
