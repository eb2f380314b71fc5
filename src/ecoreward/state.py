"""
Engine global state.

Typed access to the small fixed set of scalar globals kept in the state
store: owner, paused flag, running total, checkpoint, current reward
config and collaborator addresses.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ecoreward.models import GlobalState, RewardConfig, ServiceAddresses
from ecoreward.storage import AbstractStateStore, UnitOfWork

if TYPE_CHECKING:
    from ecoreward.config import EngineSettings

logger = logging.getLogger(__name__)

OWNER = "owner"
PAUSED = "paused"
TOTAL_DISTRIBUTED = "total_distributed"
CHECKPOINT = "checkpoint"
CONFIG = "config"
SERVICES = "services"

SUBMISSIONS_TABLE = "submissions"
RESERVATIONS_TABLE = "reservations"
FARMERS_TABLE = "farmers"
CONFIG_HISTORY_TABLE = "config_history"
PENDING_NOTIFICATIONS_TABLE = "pending_notifications"


class EngineState:
    """Typed view over the scalar globals in a state store."""

    def __init__(self, store: AbstractStateStore) -> None:
        self.store = store

    def key(self, name: str) -> str:
        return self.store.key(name)

    def initialize(self, settings: "EngineSettings") -> bool:
        """Seed missing globals from ``settings``.

        Existing values are never overwritten, so a store that already
        holds engine state keeps it.

        Returns:
            ``True`` if any global was seeded.
        """
        defaults = {
            OWNER: settings.owner,
            PAUSED: "0",
            TOTAL_DISTRIBUTED: "0",
            CHECKPOINT: str(settings.genesis_checkpoint),
            CONFIG: settings.reward.model_dump_json(),
            SERVICES: settings.services.model_dump_json(),
        }
        with UnitOfWork(self.store) as uow:
            for name, value in defaults.items():
                if self.store.get(self.key(name)) is None:
                    uow.set(self.key(name), value)
            seeded = bool(uow.writes)

        if seeded:
            logger.info(
                "Initialized engine state (owner=%s, checkpoint=%s)",
                self.owner, self.checkpoint,
            )
        return seeded

    def _int(self, name: str) -> int:
        return int(self.store.get(self.key(name)) or 0)

    @property
    def owner(self) -> str:
        return self.store.get(self.key(OWNER)) or ""

    @property
    def paused(self) -> bool:
        return self.store.get(self.key(PAUSED)) == "1"

    @property
    def total_distributed(self) -> int:
        return self._int(TOTAL_DISTRIBUTED)

    @property
    def checkpoint(self) -> int:
        return self._int(CHECKPOINT)

    @property
    def config(self) -> RewardConfig:
        raw = self.store.get(self.key(CONFIG))
        return RewardConfig.model_validate_json(raw) if raw else RewardConfig()

    @property
    def services(self) -> ServiceAddresses:
        raw = self.store.get(self.key(SERVICES))
        return ServiceAddresses.model_validate_json(raw) if raw else ServiceAddresses()

    def snapshot(self) -> GlobalState:
        return GlobalState(
            owner_id=self.owner,
            paused=self.paused,
            total_rewards_distributed=self.total_distributed,
            checkpoint=self.checkpoint,
            services=self.services,
        )
