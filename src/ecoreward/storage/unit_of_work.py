"""
Unit of work.

Collects intended state changes and hands them to the state store as one
batch. Nothing is written until ``commit``; leaving the ``with`` block
through an exception discards every staged change.
"""

from __future__ import annotations

from typing import Optional

from .provider import AbstractStateStore, StagedWrite


class UnitOfWork:
    """Staged, all-or-nothing batch of state writes.

    Usage::

        with UnitOfWork(store) as uow:
            uow.hset(store.key("submissions"), "42", record_json)
            uow.incrby(store.key("total_distributed"), amount)
        # committed here; an exception above commits nothing
    """

    def __init__(self, store: AbstractStateStore) -> None:
        self._store = store
        self._writes: list[StagedWrite] = []
        self._committed = False

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        if not self._committed:
            self.commit()

    @property
    def writes(self) -> list[StagedWrite]:
        return list(self._writes)

    @property
    def committed(self) -> bool:
        return self._committed

    def _stage(self, write: StagedWrite) -> None:
        if self._committed:
            raise RuntimeError("UnitOfWork already committed")
        self._writes.append(write)

    def set(self, key: str, value: str) -> None:
        self._stage(StagedWrite(op="set", key=key, value=value))

    def hset(self, key: str, field: str, value: str) -> None:
        self._stage(StagedWrite(op="hset", key=key, field=field, value=value))

    def hdel(self, key: str, field: str) -> None:
        self._stage(StagedWrite(op="hdel", key=key, field=field))

    def incrby(self, key: str, amount: int) -> None:
        self._stage(StagedWrite(op="incrby", key=key, amount=amount))

    def staged_hash_value(self, key: str, field: str) -> Optional[str]:
        """Latest value staged for a hash field, or ``None``."""
        for write in reversed(self._writes):
            if write.key == key and write.field == field:
                return write.value if write.op == "hset" else None
        return None

    def commit(self) -> None:
        """Apply every staged write to the store in one batch."""
        if self._committed:
            return
        if self._writes:
            self._store.apply(self._writes)
        self._committed = True

    def rollback(self) -> None:
        """Discard staged writes."""
        self._writes.clear()
