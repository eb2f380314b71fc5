"""Per-contributor reward history."""

from __future__ import annotations

from ecoreward.models import FarmerHistory
from ecoreward.state import FARMERS_TABLE
from ecoreward.storage import AbstractStateStore, UnitOfWork


class FarmerHistoryTracker:
    """Running totals per contributor. Only grows."""

    def __init__(self, store: AbstractStateStore) -> None:
        self._store = store
        self._table = store.key(FARMERS_TABLE)

    def get(self, contributor_id: str) -> FarmerHistory:
        raw = self._store.hget(self._table, contributor_id)
        if raw is None:
            return FarmerHistory(contributor_id=contributor_id)
        return FarmerHistory.model_validate_json(raw)

    def record(
        self,
        uow: UnitOfWork,
        contributor_id: str,
        amount: int,
        checkpoint: int,
    ) -> FarmerHistory:
        """Stage one more paid submission for ``contributor_id``."""
        staged = uow.staged_hash_value(self._table, contributor_id)
        current = (
            FarmerHistory.model_validate_json(staged)
            if staged is not None
            else self.get(contributor_id)
        )
        updated = FarmerHistory(
            contributor_id=contributor_id,
            total_rewards=current.total_rewards + amount,
            last_claim_checkpoint=checkpoint,
            submission_count=current.submission_count + 1,
        )
        uow.hset(self._table, contributor_id, updated.model_dump_json())
        return updated

    def contributors(self) -> list[str]:
        return sorted(self._store.hgetall(self._table))
