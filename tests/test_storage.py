"""
Tests for state stores.

Tests the memory backend directly and the Redis backend against a mocked
client, plus the unit of work that batches writes for both.
"""

from unittest.mock import MagicMock

import pytest

from ecoreward.exceptions import StorageError
from ecoreward.storage import (
    MemoryStateStore,
    RedisStateStore,
    StagedWrite,
    StorageConfig,
    UnitOfWork,
    create_state_store,
)


@pytest.fixture
def memory_store():
    """Create and connect a memory state store."""
    store = MemoryStateStore(StorageConfig(backend="memory"))
    store.connect()
    yield store
    store.disconnect()


@pytest.fixture
def redis_store():
    """Redis store wired to a mock client."""
    store = RedisStateStore(StorageConfig(backend="redis"))
    store._client = MagicMock()
    return store


class TestMemoryStateStore:
    """Test MemoryStateStore."""

    def test_connect_disconnect(self, memory_store):
        """Test connection lifecycle."""
        assert memory_store.health_check()
        memory_store.disconnect()
        assert not memory_store.health_check()

    def test_namespaced_keys(self, memory_store):
        """Test keys carry the namespace prefix."""
        assert memory_store.key("owner") == "ecoreward:owner"
        other = MemoryStateStore(StorageConfig(namespace="farm-a"))
        assert other.key("owner") == "farm-a:owner"

    def test_scalar_operations(self, memory_store):
        """Test basic get/set operations."""
        assert memory_store.get("k") is None
        assert memory_store.set("k", "v")
        assert memory_store.get("k") == "v"

    def test_hash_operations(self, memory_store):
        """Test hash operations."""
        memory_store.hset("h", "a", "1")
        memory_store.hset("h", "b", "2")
        assert memory_store.hget("h", "a") == "1"
        assert memory_store.hgetall("h") == {"a": "1", "b": "2"}
        assert memory_store.hdel("h", "a")
        assert not memory_store.hdel("h", "a")
        assert memory_store.hgetall("missing") == {}

    def test_hsetnx_only_sets_missing_fields(self, memory_store):
        """Test set-if-absent leaves an existing field alone."""
        assert memory_store.hsetnx("h", "a", "1")
        assert not memory_store.hsetnx("h", "a", "2")
        assert memory_store.hget("h", "a") == "1"

    def test_incrby(self, memory_store):
        """Test atomic increments."""
        assert memory_store.incrby("n", 5) == 5
        assert memory_store.incrby("n", 3) == 8
        assert memory_store.get("n") == "8"

    def test_apply_batch(self, memory_store):
        """Test applying a batch of writes."""
        memory_store.set("n", "10")
        memory_store.apply([
            StagedWrite(op="set", key="k", value="v"),
            StagedWrite(op="incrby", key="n", amount=5),
            StagedWrite(op="incrby", key="n", amount=1),
            StagedWrite(op="hset", key="h", field="f", value="x"),
        ])
        assert memory_store.get("k") == "v"
        assert memory_store.get("n") == "16"
        assert memory_store.hget("h", "f") == "x"

    def test_apply_is_all_or_nothing(self, memory_store):
        """Test a failing batch leaves no partial writes."""
        memory_store.set("bad", "not-a-number")
        with pytest.raises(StorageError):
            memory_store.apply([
                StagedWrite(op="set", key="k", value="v"),
                StagedWrite(op="hset", key="h", field="f", value="x"),
                StagedWrite(op="incrby", key="bad", amount=1),
            ])
        assert memory_store.get("k") is None
        assert memory_store.hget("h", "f") is None


class TestRedisStateStore:
    """Test RedisStateStore against a mock client."""

    def test_requires_connection(self):
        """Test operations require a connection."""
        store = RedisStateStore(StorageConfig(backend="redis"))
        assert not store.health_check()
        with pytest.raises(StorageError, match="not connected"):
            store.get("k")
        with pytest.raises(StorageError, match="not connected"):
            store.apply([])

    def test_get_delegates_to_client(self, redis_store):
        """Test get delegates to the client."""
        redis_store._client.get.return_value = "v"
        assert redis_store.get("k") == "v"
        redis_store._client.get.assert_called_once_with("k")

    def test_hsetnx_delegates_to_client(self, redis_store):
        """Test set-if-absent maps onto HSETNX."""
        redis_store._client.hsetnx.side_effect = [1, 0]
        assert redis_store.hsetnx("h", "f", "v")
        assert not redis_store.hsetnx("h", "f", "w")
        redis_store._client.hsetnx.assert_called_with("h", "f", "w")

    def test_client_errors_become_storage_errors(self, redis_store):
        """Test client errors become StorageError."""
        redis_store._client.hget.side_effect = Exception("connection reset")
        with pytest.raises(StorageError, match="hget"):
            redis_store.hget("h", "f")

    def test_apply_uses_transaction_pipeline(self, redis_store):
        """Test batches run in a transactional pipeline."""
        pipe = redis_store._client.pipeline.return_value
        redis_store.apply([
            StagedWrite(op="set", key="k", value="v"),
            StagedWrite(op="incrby", key="n", amount=7),
            StagedWrite(op="hset", key="h", field="f", value="x"),
            StagedWrite(op="hdel", key="h", field="g"),
        ])
        redis_store._client.pipeline.assert_called_once_with(transaction=True)
        pipe.set.assert_called_once_with("k", "v")
        pipe.incrby.assert_called_once_with("n", 7)
        pipe.hset.assert_called_once_with("h", "f", "x")
        pipe.hdel.assert_called_once_with("h", "g")
        pipe.execute.assert_called_once()

    def test_failed_transaction_raises(self, redis_store):
        """Test a failed transaction raises StorageError."""
        pipe = redis_store._client.pipeline.return_value
        pipe.execute.side_effect = Exception("EXECABORT")
        with pytest.raises(StorageError, match="transaction failed"):
            redis_store.apply([StagedWrite(op="set", key="k", value="v")])

    def test_disconnect_closes_client(self, redis_store):
        """Test disconnect closes the client."""
        client = redis_store._client
        redis_store.disconnect()
        client.close.assert_called_once()
        assert not redis_store.health_check()


class TestUnitOfWork:
    """Test UnitOfWork."""

    def test_commits_on_clean_exit(self, memory_store):
        """Test writes are applied on a clean exit."""
        with UnitOfWork(memory_store) as uow:
            uow.set("k", "v")
            uow.incrby("n", 2)
            assert memory_store.get("k") is None
        assert uow.committed
        assert memory_store.get("k") == "v"
        assert memory_store.get("n") == "2"

    def test_rolls_back_on_exception(self, memory_store):
        """Test writes are discarded on an exception."""
        with pytest.raises(ValueError):
            with UnitOfWork(memory_store) as uow:
                uow.set("k", "v")
                raise ValueError("abort")
        assert not uow.committed
        assert uow.writes == []
        assert memory_store.get("k") is None

    def test_empty_unit_does_not_touch_store(self):
        """Test an empty unit never calls the store."""
        store = MagicMock()
        with UnitOfWork(store):
            pass
        store.apply.assert_not_called()

    def test_staged_hash_value(self, memory_store):
        """Test reading back staged hash values."""
        uow = UnitOfWork(memory_store)
        assert uow.staged_hash_value("h", "f") is None
        uow.hset("h", "f", "1")
        uow.hset("h", "f", "2")
        assert uow.staged_hash_value("h", "f") == "2"
        uow.hdel("h", "f")
        assert uow.staged_hash_value("h", "f") is None

    def test_cannot_stage_after_commit(self, memory_store):
        """Test staging after commit is refused."""
        uow = UnitOfWork(memory_store)
        uow.commit()
        with pytest.raises(RuntimeError):
            uow.set("k", "v")


class TestFactory:
    """Test create_state_store."""

    def test_memory_backend(self):
        """Test the memory backend."""
        assert isinstance(create_state_store(StorageConfig(backend="memory")), MemoryStateStore)

    def test_default_is_memory(self):
        """Test memory is the default backend."""
        assert isinstance(create_state_store(), MemoryStateStore)

    def test_redis_backend(self):
        """Test the redis backend."""
        assert isinstance(create_state_store(StorageConfig(backend="redis")), RedisStateStore)

    def test_unknown_backend(self):
        """Test unknown backends are refused."""
        with pytest.raises(StorageError, match="Unknown storage backend"):
            create_state_store(StorageConfig(backend="postgres"))
