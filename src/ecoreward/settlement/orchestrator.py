"""
Distribution Orchestrator.

Sequences one settlement: pause gate, verification fetch, idempotency
check, quality threshold, stake lookup, reward computation, a claim on
the submission in the state store, mint, then a single atomic write of
ledger, totals and contributor history, followed by the settlement
notice to the verification service.

Nothing is written before the claim, and the claim is dropped again if
the mint fails. Every rejection surfaces as the matching
``SettlementError`` subclass, unchanged.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any, Optional

from pydantic import ValidationError

from ecoreward.constants import DEFAULT_MAX_STAKE_MULTIPLIER
from ecoreward.exceptions import (
    DataNotVerifiedError,
    InvalidMultiplierError,
    InvalidSubmissionError,
    PausedError,
    ReentrantSettlementError,
    SettlementError,
    StorageError,
    TokenTransferFailedError,
    ZeroRewardError,
)
from ecoreward.governance.access import AccessController, PauseSwitch
from ecoreward.governance.audit import AuditLog
from ecoreward.governance.config_store import ConfigStore
from ecoreward.models import RewardBreakdown, VerifiedSubmission
from ecoreward.observability.metrics import MetricsCollector
from ecoreward.reward.calculator import RewardCalculator
from ecoreward.reward.history import FarmerHistoryTracker
from ecoreward.reward.ledger import SubmissionLedger
from ecoreward.services.directory import ServiceDirectory
from ecoreward.state import (
    CHECKPOINT,
    PENDING_NOTIFICATIONS_TABLE,
    TOTAL_DISTRIBUTED,
    EngineState,
)
from ecoreward.storage import UnitOfWork

logger = logging.getLogger(__name__)


class DistributionOrchestrator:
    """Runs settlements one at a time.

    All settlements share one re-entrant lock, so calls from different
    threads queue up behind each other. A collaborator that calls back
    into ``settle`` while a settlement is running on the same thread
    gets ``ReentrantSettlementError``.
    """

    def __init__(
        self,
        state: EngineState,
        directory: ServiceDirectory,
        config_store: ConfigStore,
        ledger: SubmissionLedger,
        history: FarmerHistoryTracker,
        pause: PauseSwitch,
        access: AccessController,
        calculator: Optional[RewardCalculator] = None,
        max_stake_multiplier: int = DEFAULT_MAX_STAKE_MULTIPLIER,
        audit: Optional[AuditLog] = None,
        metrics: Optional[MetricsCollector] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._state = state
        self._directory = directory
        self._config_store = config_store
        self._ledger = ledger
        self._history = history
        self._pause = pause
        self._access = access
        self._calculator = calculator or RewardCalculator()
        self._max_stake_multiplier = max_stake_multiplier
        self._audit = audit
        self._metrics = metrics
        self._lock = lock or threading.RLock()
        self._in_progress = False
        self._pending_table = state.key(PENDING_NOTIFICATIONS_TABLE)

    @property
    def calculator(self) -> RewardCalculator:
        return self._calculator

    # ── Public operations ─────────────────────────────────────

    def settle(self, submission_id: Any, caller: str) -> int:
        """Settle one submission and return the amount paid.

        Raises:
            PausedError, InvalidSubmissionError, AlreadyRewardedError,
            DataNotVerifiedError, InvalidMultiplierError,
            InvalidQualityScoreError, ZeroRewardError,
            TokenTransferFailedError, ReentrantSettlementError.
        """
        sid = str(submission_id)
        started = time.monotonic()

        with self._lock:
            if self._in_progress:
                raise ReentrantSettlementError(
                    f"settle({sid}) called while another settlement is in progress"
                )
            self._in_progress = True
            try:
                breakdown = self._settle(sid, caller)
            except SettlementError as exc:
                self._record_rejection(sid, caller, exc, time.monotonic() - started)
                raise
            finally:
                self._in_progress = False

        if self._metrics:
            self._metrics.record_settlement(
                "settled", breakdown.amount, time.monotonic() - started
            )
        return breakdown.amount

    def preview(self, submission_id: Any) -> RewardBreakdown:
        """Evaluate a settlement up to the reward amount without paying.

        Runs the same checks as ``settle`` (including the pause gate and
        the zero-reward rejection) but never mints or writes state.
        """
        with self._lock:
            _, breakdown = self._evaluate(str(submission_id))
        return breakdown

    def pending_notifications(self) -> list[str]:
        """Submission ids whose settlement notice is still undelivered."""
        return sorted(self._state.store.hgetall(self._pending_table))

    def retry_notifications(self, caller: str) -> list[str]:
        """Re-send undelivered settlement notices (owner only).

        Returns:
            The submission ids that were delivered and cleared.
        """
        self._access.require_owner(caller)
        cleared: list[str] = []
        with self._lock:
            for sid in self.pending_notifications():
                if self._deliver_notice(sid):
                    self._state.store.hdel(self._pending_table, sid)
                    cleared.append(sid)
            if self._metrics:
                self._metrics.set_pending_notifications(len(self.pending_notifications()))
        if cleared:
            logger.info("Delivered %d pending settlement notices", len(cleared))
        return cleared

    # ── Workflow ──────────────────────────────────────────────

    def _evaluate(self, sid: str) -> tuple[VerifiedSubmission, RewardBreakdown]:
        if self._pause.is_paused():
            raise PausedError("Distribution is paused")

        submission = self._fetch_submission(sid)
        self._ledger.ensure_unpaid(sid)

        config = self._config_store.get()
        if submission.quality_score < config.quality_threshold:
            raise DataNotVerifiedError(
                f"Quality score {submission.quality_score} of submission {sid} "
                f"is below threshold {config.quality_threshold}"
            )

        stake_multiplier = self._fetch_stake_multiplier(submission.contributor_id)
        breakdown = self._calculator.breakdown(
            submission.quality_score,
            submission.impact_metrics,
            stake_multiplier,
            config,
        ).model_copy(
            update={"submission_id": sid, "contributor_id": submission.contributor_id}
        )
        if breakdown.amount == 0:
            raise ZeroRewardError(
                f"Reward for submission {sid} truncates to zero "
                f"(final={breakdown.final}, micro_unit={breakdown.micro_unit})"
            )
        return submission, breakdown

    def _settle(self, sid: str, caller: str) -> RewardBreakdown:
        submission, breakdown = self._evaluate(sid)
        contributor = submission.contributor_id
        amount = breakdown.amount

        self._ledger.try_reserve(sid, f"{caller}:{uuid.uuid4().hex}")
        try:
            self._mint(amount, contributor)
        except Exception:
            self._ledger.release(sid)
            raise

        # The claim stays in place from here on, so a failed commit can
        # never lead to a second payment.
        checkpoint = self._state.checkpoint
        try:
            with UnitOfWork(self._state.store) as uow:
                self._ledger.commit(uow, sid, amount, checkpoint)
                uow.incrby(self._state.key(TOTAL_DISTRIBUTED), amount)
                self._history.record(uow, contributor, amount, checkpoint)
                uow.incrby(self._state.key(CHECKPOINT), 1)
        except Exception as exc:
            logger.error(
                "Minted %d to %s for submission %s but the state commit failed: %s",
                amount, contributor, sid, exc,
            )
            if self._audit:
                self._audit.record(
                    event_type="settlement_unrecorded",
                    actor=caller,
                    action="settle",
                    subject=sid,
                    details={
                        "contributor_id": contributor,
                        "amount": amount,
                        "error": type(exc).__name__,
                    },
                    outcome="error",
                )
            if isinstance(exc, StorageError):
                raise
            raise StorageError(
                f"Submission {sid} was paid but its state commit failed: {exc}"
            ) from exc

        logger.info(
            "Settled submission %s: %d to %s at checkpoint %d",
            sid, amount, contributor, checkpoint,
        )
        if self._audit:
            self._audit.record(
                event_type="reward_settled",
                actor=caller,
                action="settle",
                subject=sid,
                details={
                    "contributor_id": contributor,
                    "amount": amount,
                    "checkpoint": checkpoint,
                    "tier_index": breakdown.tier_index,
                    "stake_multiplier": breakdown.stake_multiplier,
                },
            )

        if not self._deliver_notice(sid):
            self._queue_notice(sid, contributor, caller)
        return breakdown

    # ── Collaborator calls ────────────────────────────────────

    def _fetch_submission(self, sid: str) -> VerifiedSubmission:
        try:
            service = self._directory.resolve(self._state.services.verification)
            raw = service.get_verified_data(sid)
        except SettlementError:
            raise
        except Exception as exc:
            raise InvalidSubmissionError(
                f"Verification service could not provide submission {sid}: {exc}"
            ) from exc

        if raw is None:
            raise InvalidSubmissionError(f"Submission {sid} is not available")

        if isinstance(raw, VerifiedSubmission):
            submission = raw
        else:
            try:
                submission = VerifiedSubmission.model_validate({"submission_id": sid, **dict(raw)})
            except (TypeError, ValueError, ValidationError) as exc:
                raise InvalidSubmissionError(f"Submission {sid} is malformed: {exc}") from exc

        if submission.submission_id != sid:
            raise InvalidSubmissionError(
                f"Verification service returned submission {submission.submission_id} for {sid}"
            )
        logger.debug("Fetched submission %s (quality=%d)", sid, submission.quality_score)
        return submission

    def _fetch_stake_multiplier(self, contributor_id: str) -> int:
        try:
            service = self._directory.resolve(self._state.services.staking)
            multiplier = service.get_stake_multiplier(contributor_id)
        except SettlementError:
            raise
        except Exception as exc:
            raise InvalidMultiplierError(
                f"Staking service could not provide a multiplier for {contributor_id}: {exc}"
            ) from exc

        if isinstance(multiplier, bool) or not isinstance(multiplier, int):
            raise InvalidMultiplierError(f"Stake multiplier must be an integer, got {multiplier!r}")
        if not 0 <= multiplier <= self._max_stake_multiplier:
            raise InvalidMultiplierError(
                f"Stake multiplier {multiplier} for {contributor_id} is outside "
                f"[0, {self._max_stake_multiplier}]"
            )
        return multiplier

    def _mint(self, amount: int, contributor_id: str) -> None:
        try:
            service = self._directory.resolve(self._state.services.token)
            minted = service.mint(amount, contributor_id)
        except SettlementError:
            raise
        except Exception as exc:
            raise TokenTransferFailedError(
                f"Minting {amount} to {contributor_id} failed: {exc}"
            ) from exc

        if not minted:
            raise TokenTransferFailedError(f"Token service declined to mint {amount} to {contributor_id}")
        logger.debug("Minted %d to %s", amount, contributor_id)

    def _deliver_notice(self, sid: str) -> bool:
        # Payment is final at this point; a failed notice is queued, not raised.
        try:
            service = self._directory.resolve(self._state.services.verification)
            return bool(service.mark_rewarded(sid))
        except Exception:
            logger.exception("Settlement notice for submission %s failed", sid)
            return False

    def _queue_notice(self, sid: str, contributor_id: str, caller: str) -> None:
        self._state.store.hset(self._pending_table, sid, contributor_id)
        logger.error(
            "Submission %s is settled but the verification service was not notified; "
            "queued for retry",
            sid,
        )
        if self._audit:
            self._audit.record(
                event_type="notification_failed",
                actor=caller,
                action="mark_rewarded",
                subject=sid,
                details={"contributor_id": contributor_id},
                outcome="error",
            )
        if self._metrics:
            self._metrics.set_pending_notifications(len(self.pending_notifications()))

    # ── Bookkeeping ───────────────────────────────────────────

    def _record_rejection(
        self,
        sid: str,
        caller: str,
        exc: SettlementError,
        duration: float,
    ) -> None:
        logger.warning("Settlement of submission %s rejected: %s", sid, exc)
        if self._audit:
            self._audit.record(
                event_type="settlement_rejected",
                actor=caller,
                action="settle",
                subject=sid,
                details={"error": type(exc).__name__, "code": exc.code, "message": str(exc)},
                outcome="denied",
            )
        if self._metrics:
            self._metrics.record_settlement(type(exc).__name__, duration=duration)
