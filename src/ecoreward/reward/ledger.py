"""
Submission Ledger.

Idempotent record of which submissions have been paid and for how much.
"""

from __future__ import annotations

from typing import Optional

from ecoreward.exceptions import AlreadyRewardedError, InvalidAmountError
from ecoreward.models import SubmissionRecord
from ecoreward.state import RESERVATIONS_TABLE, SUBMISSIONS_TABLE
from ecoreward.storage import AbstractStateStore, UnitOfWork


class SubmissionLedger:
    """Keyed table of ``SubmissionRecord`` by submission id.

    A record is written once, when the submission is paid, and is never
    changed afterwards. While a settlement is in flight the submission
    holds a claim in a separate reservations table; the claim is taken
    with a set-if-absent write so engines sharing one store cannot both
    pay the same submission.
    """

    def __init__(self, store: AbstractStateStore) -> None:
        self._store = store
        self._table = store.key(SUBMISSIONS_TABLE)
        self._reservations = store.key(RESERVATIONS_TABLE)

    def get(self, submission_id: str) -> SubmissionRecord:
        """Return the record for ``submission_id``, or a default unpaid one."""
        sid = str(submission_id)
        raw = self._store.hget(self._table, sid)
        if raw is None:
            return SubmissionRecord(submission_id=sid)
        return SubmissionRecord.model_validate_json(raw)

    def is_rewarded(self, submission_id: str) -> bool:
        return self.get(submission_id).rewarded

    def ensure_unpaid(self, submission_id: str) -> None:
        """Raise ``AlreadyRewardedError`` if ``submission_id`` was paid.

        Read-only; takes no claim on the submission.
        """
        if self.is_rewarded(submission_id):
            raise AlreadyRewardedError(f"Submission {submission_id} was already rewarded")

    def try_reserve(self, submission_id: str, holder: str) -> None:
        """Claim ``submission_id`` for settlement by ``holder``.

        The claim is released by ``release`` or cleared by the batch
        staged in ``commit``.

        Raises:
            AlreadyRewardedError: If the submission is paid or already
                claimed by another settlement.
        """
        sid = str(submission_id)
        self.ensure_unpaid(sid)
        if not self._store.hsetnx(self._reservations, sid, holder):
            raise AlreadyRewardedError(f"Submission {sid} is already being settled")
        # A commit may have landed between the check and the claim.
        if self.is_rewarded(sid):
            self.release(sid)
            raise AlreadyRewardedError(f"Submission {sid} was already rewarded")

    def release(self, submission_id: str) -> None:
        self._store.hdel(self._reservations, str(submission_id))

    def reserved_by(self, submission_id: str) -> Optional[str]:
        """Holder of the settlement claim on ``submission_id``, if any."""
        return self._store.hget(self._reservations, str(submission_id))

    def commit(
        self,
        uow: UnitOfWork,
        submission_id: str,
        amount: int,
        checkpoint: int,
    ) -> SubmissionRecord:
        """Stage the rewarded record for ``submission_id`` in ``uow``.

        The same batch clears the settlement claim.

        Raises:
            InvalidAmountError: If ``amount`` is not a positive integer.
            AlreadyRewardedError: If the submission is already rewarded,
                in the store or earlier in the same unit of work.
        """
        sid = str(submission_id)
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidAmountError(f"Reward amount must be positive, got {amount!r}")
        if uow.staged_hash_value(self._table, sid) is not None:
            raise AlreadyRewardedError(f"Submission {sid} is already staged for reward")
        self.ensure_unpaid(sid)

        record = SubmissionRecord(
            submission_id=sid,
            rewarded=True,
            amount=amount,
            checkpoint=checkpoint,
        )
        uow.hset(self._table, sid, record.model_dump_json())
        uow.hdel(self._reservations, sid)
        return record

    def rewarded_count(self) -> int:
        return len(self._store.hgetall(self._table))
