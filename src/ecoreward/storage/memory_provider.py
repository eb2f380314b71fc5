"""
In-Memory State Store.

Simple in-memory implementation for development and testing.
"""

from typing import Optional
import threading
from collections import defaultdict

from ecoreward.exceptions import StorageError

from .provider import AbstractStateStore, StagedWrite, StorageConfig


class MemoryStateStore(AbstractStateStore):
    """
    In-memory state store.

    Uses Python dictionaries for storage. Data is lost on restart.
    Suitable for development, tests and single-process deployments.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize in-memory storage."""
        super().__init__(config or StorageConfig(backend="memory"))
        self._data: dict[str, str] = {}
        self._hashes: dict[str, dict[str, str]] = defaultdict(dict)
        self._lock = threading.Lock()
        self._connected = False

    def connect(self) -> None:
        """Establish connection (no-op for memory)."""
        self._connected = True

    def disconnect(self) -> None:
        """Close connection (no-op for memory)."""
        self._connected = False

    def health_check(self) -> bool:
        """Check if storage is healthy."""
        return self._connected

    # Scalar Operations

    def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        return self._data.get(key)

    def set(self, key: str, value: str) -> bool:
        """Set value."""
        with self._lock:
            self._data[key] = value
        return True

    # Hash Operations

    def hget(self, key: str, field: str) -> Optional[str]:
        """Get hash field value."""
        return self._hashes.get(key, {}).get(field)

    def hset(self, key: str, field: str, value: str) -> bool:
        """Set hash field value."""
        with self._lock:
            self._hashes[key][field] = value
        return True

    def hsetnx(self, key: str, field: str, value: str) -> bool:
        """Set hash field if absent."""
        with self._lock:
            if field in self._hashes[key]:
                return False
            self._hashes[key][field] = value
        return True

    def hgetall(self, key: str) -> dict[str, str]:
        """Get all hash fields."""
        return dict(self._hashes.get(key, {}))

    def hdel(self, key: str, field: str) -> bool:
        """Delete hash field."""
        with self._lock:
            if key in self._hashes and field in self._hashes[key]:
                del self._hashes[key][field]
                return True
        return False

    # Atomic Operations

    def incrby(self, key: str, amount: int) -> int:
        """Increment value by amount."""
        with self._lock:
            new_value = self._parse_int(key, self._data.get(key, "0")) + amount
            self._data[key] = str(new_value)
        return new_value

    def apply(self, writes: list[StagedWrite]) -> None:
        """Apply a batch of writes atomically.

        Every write is resolved against an overlay first; the live
        dictionaries are only touched once the whole batch is valid.
        """
        with self._lock:
            data: dict[str, str] = {}
            hashes: dict[tuple[str, str], Optional[str]] = {}

            for write in writes:
                if write.op == "set":
                    data[write.key] = write.value
                elif write.op == "incrby":
                    current = data.get(write.key, self._data.get(write.key, "0"))
                    data[write.key] = str(self._parse_int(write.key, current) + write.amount)
                elif write.op in ("hset", "hdel"):
                    if write.field is None:
                        raise StorageError(f"{write.op} on {write.key} requires a field")
                    hashes[(write.key, write.field)] = (
                        write.value if write.op == "hset" else None
                    )
                else:
                    raise StorageError(f"Unsupported write op: {write.op}")

            self._data.update(data)
            for (key, field), value in hashes.items():
                if value is None:
                    self._hashes[key].pop(field, None)
                else:
                    self._hashes[key][field] = value

    @staticmethod
    def _parse_int(key: str, raw: str) -> int:
        try:
            return int(raw)
        except ValueError as exc:
            raise StorageError(f"Value at {key} is not an integer: {raw!r}") from exc
