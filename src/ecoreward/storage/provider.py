"""
Abstract State Store Interface.

Defines the contract that all state backends must implement. Engine
state is a handful of scalar globals plus keyed tables (hashes); every
multi-key mutation goes through ``apply`` so that it lands atomically.
"""

from abc import ABC, abstractmethod
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class StorageConfig(BaseModel):
    """Configuration for the state store."""

    backend: str = Field(default="memory", description="State backend type")
    namespace: str = Field(default="ecoreward", min_length=1, description="Key prefix")
    connection_string: Optional[str] = Field(default=None, description="Connection URL")
    timeout_seconds: int = Field(default=30, ge=1, le=300, description="Operation timeout")

    # Redis-specific
    redis_host: Optional[str] = Field(default="localhost")
    redis_port: int = Field(default=6379, ge=1, le=65535)
    redis_db: int = Field(default=0, ge=0)
    redis_password: Optional[str] = None
    redis_ssl: bool = False


class StagedWrite(BaseModel):
    """One pending mutation, applied later as part of a batch."""

    model_config = ConfigDict(frozen=True)

    op: Literal["set", "hset", "hdel", "incrby"]
    key: str
    field: Optional[str] = None
    value: str = ""
    amount: int = 0


class AbstractStateStore(ABC):
    """
    Abstract state store.

    Backends must provide:
    - Scalar get/set for globals
    - Hash operations for keyed tables
    - Atomic application of a batch of staged writes
    """

    def __init__(self, config: StorageConfig):
        """Initialize the store with configuration."""
        self.config = config

    def key(self, name: str) -> str:
        """Return the namespaced key for ``name``."""
        return f"{self.config.namespace}:{name}"

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the backend."""

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to the backend."""

    @abstractmethod
    def health_check(self) -> bool:
        """Check if the backend is healthy."""

    # Scalar Operations

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get value by key."""

    @abstractmethod
    def set(self, key: str, value: str) -> bool:
        """Set value."""

    # Hash Operations (keyed tables)

    @abstractmethod
    def hget(self, key: str, field: str) -> Optional[str]:
        """Get hash field value."""

    @abstractmethod
    def hset(self, key: str, field: str, value: str) -> bool:
        """Set hash field value."""

    @abstractmethod
    def hsetnx(self, key: str, field: str, value: str) -> bool:
        """Set hash field only if it does not exist. Returns True if set."""

    @abstractmethod
    def hgetall(self, key: str) -> dict[str, str]:
        """Get all hash fields."""

    @abstractmethod
    def hdel(self, key: str, field: str) -> bool:
        """Delete hash field."""

    # Atomic Operations

    @abstractmethod
    def incrby(self, key: str, amount: int) -> int:
        """Increment value by amount. Returns new value."""

    @abstractmethod
    def apply(self, writes: list[StagedWrite]) -> None:
        """Apply every write in ``writes`` or none of them.

        Raises:
            StorageError: If the batch could not be applied. No write
                from the batch is visible afterwards.
        """
