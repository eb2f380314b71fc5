"""
Redis State Store.

Redis backend; staged batches are applied inside a MULTI/EXEC pipeline.
"""

from typing import Optional
import logging

from ecoreward.exceptions import StorageError

from .provider import AbstractStateStore, StagedWrite, StorageConfig

logger = logging.getLogger(__name__)


class RedisStateStore(AbstractStateStore):
    """
    Redis state store.

    Features:
    - Connection from URL or host/port settings
    - Transactional batch application
    - Error translation to ``StorageError``

    Requires: redis package
    """

    def __init__(self, config: StorageConfig):
        """Initialize Redis storage."""
        super().__init__(config)
        self._client = None
        self._redis_error: type[Exception] = Exception

    def connect(self) -> None:
        """Establish connection to Redis."""
        try:
            import redis
        except ImportError:
            raise ImportError(
                "redis package is required for RedisStateStore. "
                "Install with: pip install ecoreward[redis]"
            )

        self._redis_error = redis.RedisError
        if self.config.connection_string:
            self._client = redis.Redis.from_url(
                self.config.connection_string,
                socket_timeout=self.config.timeout_seconds,
                decode_responses=True,
            )
        else:
            self._client = redis.Redis(
                host=self.config.redis_host,
                port=self.config.redis_port,
                db=self.config.redis_db,
                password=self.config.redis_password,
                ssl=self.config.redis_ssl,
                socket_timeout=self.config.timeout_seconds,
                socket_connect_timeout=self.config.timeout_seconds,
                decode_responses=True,
            )

        # Test connection
        self._call("ping")

    def disconnect(self) -> None:
        """Close connection to Redis."""
        if self._client:
            self._client.close()
            self._client = None

    def health_check(self) -> bool:
        """Check if Redis is healthy."""
        if self._client is None:
            return False
        try:
            return bool(self._client.ping())
        except self._redis_error:
            logger.debug("Redis health check failed", exc_info=True)
        return False

    def _call(self, method: str, *args):
        if self._client is None:
            raise StorageError("RedisStateStore is not connected")
        try:
            return getattr(self._client, method)(*args)
        except self._redis_error as exc:
            raise StorageError(f"Redis {method} failed: {exc}") from exc

    # Scalar Operations

    def get(self, key: str) -> Optional[str]:
        """Get value by key."""
        return self._call("get", key)

    def set(self, key: str, value: str) -> bool:
        """Set value."""
        return bool(self._call("set", key, value))

    # Hash Operations

    def hget(self, key: str, field: str) -> Optional[str]:
        """Get hash field value."""
        return self._call("hget", key, field)

    def hset(self, key: str, field: str, value: str) -> bool:
        """Set hash field value."""
        return self._call("hset", key, field, value) >= 0

    def hsetnx(self, key: str, field: str, value: str) -> bool:
        """Set hash field if absent."""
        return bool(self._call("hsetnx", key, field, value))

    def hgetall(self, key: str) -> dict[str, str]:
        """Get all hash fields."""
        return dict(self._call("hgetall", key))

    def hdel(self, key: str, field: str) -> bool:
        """Delete hash field."""
        return self._call("hdel", key, field) > 0

    # Atomic Operations

    def incrby(self, key: str, amount: int) -> int:
        """Increment value by amount."""
        return int(self._call("incrby", key, amount))

    def apply(self, writes: list[StagedWrite]) -> None:
        """Apply a batch of writes in one MULTI/EXEC transaction."""
        if self._client is None:
            raise StorageError("RedisStateStore is not connected")

        pipe = self._client.pipeline(transaction=True)
        for write in writes:
            if write.op == "set":
                pipe.set(write.key, write.value)
            elif write.op == "incrby":
                pipe.incrby(write.key, write.amount)
            elif write.op == "hset":
                pipe.hset(write.key, write.field, write.value)
            elif write.op == "hdel":
                pipe.hdel(write.key, write.field)
            else:
                pipe.reset()
                raise StorageError(f"Unsupported write op: {write.op}")

        try:
            pipe.execute()
        except self._redis_error as exc:
            raise StorageError(f"Redis transaction failed: {exc}") from exc
