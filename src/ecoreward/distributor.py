"""
Reward Distributor.

Public entry point of the engine. Wires the state store, governance
components and the settlement orchestrator together and exposes every
settlement, administrative and read-only operation.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional, Sequence, TypeVar

from ecoreward.config import EngineSettings
from ecoreward.exceptions import ConfigUpdateFailedError, SettlementError
from ecoreward.governance.access import AccessController, PauseSwitch
from ecoreward.governance.audit import AuditLog
from ecoreward.governance.config_store import ConfigStore, build_config
from ecoreward.models import (
    ConfigHistoryEntry,
    FarmerHistory,
    RewardBreakdown,
    RewardConfig,
    ServiceAddresses,
    SubmissionRecord,
)
from ecoreward.observability.metrics import MetricsCollector
from ecoreward.reward.calculator import RewardCalculator
from ecoreward.reward.history import FarmerHistoryTracker
from ecoreward.reward.ledger import SubmissionLedger
from ecoreward.services.directory import ServiceDirectory
from ecoreward.settlement import DistributionOrchestrator
from ecoreward.state import SERVICES, EngineState
from ecoreward.storage import AbstractStateStore, UnitOfWork, create_state_store

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RewardDistributor:
    """Settles verified submissions and administers reward parameters.

    Settlements and administrative changes share one re-entrant lock, so
    every mutation happens in a single global order.

    Example:
        >>> directory = ServiceDirectory({
        ...     "data-verifier": verifier,
        ...     "staking-pool": StaticStakingService(),
        ...     "eco-token": InMemoryTokenService(),
        ... })
        >>> distributor = RewardDistributor(directory=directory)
        >>> distributor.settle("sub-1", caller="anyone")
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        directory: Optional[ServiceDirectory] = None,
        store: Optional[AbstractStateStore] = None,
        audit: Optional[AuditLog] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self._owns_store = store is None
        if store is None:
            store = create_state_store(self.settings.storage)
            store.connect()
        self._store = store

        self.directory = directory if directory is not None else ServiceDirectory()
        self.audit = audit if audit is not None else AuditLog()
        self.metrics = metrics

        self._state = EngineState(store)
        self._state.initialize(self.settings)

        self._lock = threading.RLock()
        self._access = AccessController(self._state)
        self._pause = PauseSwitch(self._state, self._access)
        self._config_store = ConfigStore(self._state, self._access)
        self._ledger = SubmissionLedger(store)
        self._history = FarmerHistoryTracker(store)
        self._calculator = RewardCalculator(micro_unit=self.settings.micro_unit)
        self._orchestrator = DistributionOrchestrator(
            state=self._state,
            directory=self.directory,
            config_store=self._config_store,
            ledger=self._ledger,
            history=self._history,
            pause=self._pause,
            access=self._access,
            calculator=self._calculator,
            max_stake_multiplier=self.settings.max_stake_multiplier,
            audit=self.audit,
            metrics=self.metrics,
            lock=self._lock,
        )

        if self.metrics:
            self.metrics.set_paused(self._state.paused)
            self.metrics.set_pending_notifications(len(self._orchestrator.pending_notifications()))

    def close(self) -> None:
        """Disconnect the state store if this distributor created it."""
        if self._owns_store:
            self._store.disconnect()

    # ── Settlement ────────────────────────────────────────────

    def settle(self, submission_id: Any, caller: str) -> int:
        """Pay the reward for one verified submission.

        Returns:
            The amount minted to the contributor.
        """
        return self._orchestrator.settle(submission_id, caller)

    def preview_reward(self, submission_id: Any) -> RewardBreakdown:
        """Compute what ``settle`` would pay, without paying it."""
        return self._orchestrator.preview(submission_id)

    def pending_notifications(self) -> list[str]:
        return self._orchestrator.pending_notifications()

    def retry_notifications(self, caller: str) -> list[str]:
        return self._admin(
            "retry_notifications",
            "notification_retried",
            caller,
            lambda: self._orchestrator.retry_notifications(caller),
        )

    # ── Administration ────────────────────────────────────────

    def set_config(
        self,
        caller: str,
        base_rate: int,
        carbon_mul: int,
        water_mul: int,
        yield_mul: int,
        threshold: int,
    ) -> ConfigHistoryEntry:
        """Replace the scalar reward parameters, keeping the tier list."""
        updates = {
            "base_rate": base_rate,
            "carbon_multiplier": carbon_mul,
            "water_multiplier": water_mul,
            "yield_multiplier": yield_mul,
            "quality_threshold": threshold,
        }

        def apply() -> ConfigHistoryEntry:
            self._access.require_owner(caller)
            config = build_config(self._config_store.get(), **updates)
            return self._config_store.set(config, caller)

        return self._admin("set_config", "config_updated", caller, apply, details=updates)

    def set_tier_multipliers(self, caller: str, tiers: Sequence[int]) -> ConfigHistoryEntry:
        """Replace the three quality-tier multipliers."""
        return self._admin(
            "set_tier_multipliers",
            "tiers_updated",
            caller,
            lambda: self._config_store.set_tiers(tiers, caller),
            details={"tier_multipliers": _jsonable(tiers)},
        )

    def pause(self, caller: str) -> None:
        self._set_paused(True, caller)

    def unpause(self, caller: str) -> None:
        self._set_paused(False, caller)

    def set_verification_service(self, caller: str, address: str) -> ServiceAddresses:
        return self._set_service(caller, "verification", address)

    def set_staking_service(self, caller: str, address: str) -> ServiceAddresses:
        return self._set_service(caller, "staking", address)

    def set_token_service(self, caller: str, address: str) -> ServiceAddresses:
        return self._set_service(caller, "token", address)

    def transfer_ownership(self, caller: str, new_owner: str) -> str:
        """Hand ownership to ``new_owner``; returns the previous owner."""
        return self._admin(
            "transfer_ownership",
            "ownership_transferred",
            caller,
            lambda: self._access.transfer_ownership(new_owner, caller),
            details={"new_owner": _jsonable(new_owner)},
        )

    def _set_paused(self, paused: bool, caller: str) -> None:
        action = "pause" if paused else "unpause"
        self._admin(
            action,
            "pause_changed",
            caller,
            lambda: self._pause.set(paused, caller),
            details={"paused": paused},
        )
        if self.metrics:
            self.metrics.set_paused(self._state.paused)

    def _set_service(self, caller: str, kind: str, address: str) -> ServiceAddresses:
        def apply() -> ServiceAddresses:
            self._access.require_owner(caller)
            if not isinstance(address, str) or not address.strip():
                raise ConfigUpdateFailedError(f"{kind} service address must be a non-empty string")
            updated = self._state.services.model_copy(update={kind: address})
            with UnitOfWork(self._store) as uow:
                uow.set(self._state.key(SERVICES), updated.model_dump_json())
            logger.info("%s service repointed to %s by %s", kind.capitalize(), address, caller)
            return updated

        return self._admin(
            f"set_{kind}_service",
            "service_repointed",
            caller,
            apply,
            subject=kind,
            details={"address": _jsonable(address)},
        )

    def _admin(
        self,
        action: str,
        event_type: str,
        caller: str,
        operation: Callable[[], T],
        subject: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> T:
        """Run an owner-gated mutation under the global lock and record it."""
        with self._lock:
            try:
                result = operation()
            except SettlementError as exc:
                logger.warning("%s by %s rejected: %s", action, caller, exc)
                self.audit.record(
                    event_type=event_type,
                    actor=caller,
                    action=action,
                    subject=subject,
                    details={**(details or {}), "error": type(exc).__name__, "code": exc.code},
                    outcome="denied",
                )
                if self.metrics:
                    self.metrics.record_admin_action(action, "denied")
                raise

            self.audit.record(
                event_type=event_type,
                actor=caller,
                action=action,
                subject=subject,
                details={**(details or {}), "checkpoint": self._state.checkpoint},
            )
        if self.metrics:
            self.metrics.record_admin_action(action, "success")
        return result

    # ── Queries ───────────────────────────────────────────────

    def get_config(self) -> RewardConfig:
        return self._config_store.get()

    def get_total_distributed(self) -> int:
        return self._state.total_distributed

    def get_submission_record(self, submission_id: Any) -> SubmissionRecord:
        return self._ledger.get(str(submission_id))

    def get_farmer_history(self, contributor_id: str) -> FarmerHistory:
        return self._history.get(contributor_id)

    def get_config_history(self, checkpoint: int) -> Optional[ConfigHistoryEntry]:
        """The config change recorded at ``checkpoint``, or ``None``."""
        return self._config_store.history(checkpoint)

    def list_config_history(self) -> list[ConfigHistoryEntry]:
        return self._config_store.history_entries()

    def is_paused(self) -> bool:
        return self._pause.is_paused()

    def get_owner(self) -> str:
        return self._access.owner

    def get_checkpoint(self) -> int:
        return self._state.checkpoint

    def get_service_addresses(self) -> ServiceAddresses:
        return self._state.services

    def summary(self) -> dict[str, Any]:
        """Snapshot of the engine for dashboards and the CLI."""
        snapshot = self._state.snapshot()
        return {
            "owner": snapshot.owner_id,
            "paused": snapshot.paused,
            "checkpoint": snapshot.checkpoint,
            "total_distributed": snapshot.total_rewards_distributed,
            "rewarded_submissions": self._ledger.rewarded_count(),
            "contributors": len(self._history.contributors()),
            "config": self._config_store.get().model_dump(mode="json"),
            "services": snapshot.services.model_dump(),
            "pending_notifications": len(self._orchestrator.pending_notifications()),
            "audit_entries": len(self.audit),
        }


def _jsonable(value: Any) -> Any:
    """Coerce caller-supplied values into something the audit hash accepts."""
    if isinstance(value, (str, int, bool)) or value is None:
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return repr(value)
