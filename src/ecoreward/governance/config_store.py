"""
Config Store

Current reward parameters plus an append-only history of every change,
keyed by the checkpoint at which the change took effect. History
entries are never rewritten.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional, Sequence

from pydantic import ValidationError

from ecoreward.constants import TIER_COUNT
from ecoreward.exceptions import ConfigUpdateFailedError
from ecoreward.governance.access import AccessController
from ecoreward.models import ConfigHistoryEntry, RewardConfig
from ecoreward.state import CHECKPOINT, CONFIG, CONFIG_HISTORY_TABLE, EngineState
from ecoreward.storage import UnitOfWork

logger = logging.getLogger(__name__)


def build_config(base: RewardConfig, **updates: Any) -> RewardConfig:
    """Return ``base`` with ``updates`` applied, fully re-validated.

    Raises:
        ConfigUpdateFailedError: If the resulting config is invalid.
    """
    try:
        return RewardConfig.model_validate({**base.model_dump(), **updates})
    except ValidationError as exc:
        raise ConfigUpdateFailedError(f"Invalid reward config: {exc}") from exc


class ConfigStore:
    """Versioned reward configuration."""

    def __init__(self, state: EngineState, access: AccessController) -> None:
        self._state = state
        self._access = access
        self._history_table = state.key(CONFIG_HISTORY_TABLE)

    def get(self) -> RewardConfig:
        return self._state.config

    @property
    def checkpoint(self) -> int:
        return self._state.checkpoint

    def set(self, new_config: RewardConfig, caller: str) -> ConfigHistoryEntry:
        """Replace the whole config (owner only).

        Raises:
            NotAuthorizedError: If ``caller`` is not the owner.
            ConfigUpdateFailedError: If ``new_config`` does not carry
                exactly three tier multipliers.
        """
        self._access.require_owner(caller)
        config = build_config(new_config)
        self._check_tiers(config.tier_multipliers)
        return self._write(config, "config", caller)

    def set_tiers(self, tiers: Sequence[int], caller: str) -> ConfigHistoryEntry:
        """Replace only the tier multipliers (owner only)."""
        self._access.require_owner(caller)
        if isinstance(tiers, (str, bytes)):
            raise ConfigUpdateFailedError("Tier multipliers must be a sequence of integers")
        try:
            tiers = tuple(tiers)
        except TypeError as exc:
            raise ConfigUpdateFailedError("Tier multipliers must be a sequence of integers") from exc
        self._check_tiers(tiers)
        config = build_config(self.get(), tier_multipliers=tiers)
        return self._write(config, "tiers", caller)

    @staticmethod
    def _check_tiers(tiers: Sequence[Any]) -> None:
        if len(tiers) != TIER_COUNT:
            raise ConfigUpdateFailedError(
                f"Exactly {TIER_COUNT} tier multipliers are required, got {len(tiers)}"
            )

    def _write(
        self,
        config: RewardConfig,
        change: Literal["config", "tiers"],
        caller: str,
    ) -> ConfigHistoryEntry:
        checkpoint = self._state.checkpoint
        entry = ConfigHistoryEntry.from_config(config, checkpoint, change, caller)

        with UnitOfWork(self._state.store) as uow:
            uow.set(self._state.key(CONFIG), config.model_dump_json())
            uow.hset(self._history_table, str(checkpoint), entry.model_dump_json())
            uow.incrby(self._state.key(CHECKPOINT), 1)

        logger.info("Reward %s updated by %s at checkpoint %d", change, caller, checkpoint)
        return entry

    def history(self, checkpoint: int) -> Optional[ConfigHistoryEntry]:
        """Return the change recorded at ``checkpoint``, if any."""
        raw = self._state.store.hget(self._history_table, str(checkpoint))
        if raw is None:
            return None
        return ConfigHistoryEntry.model_validate_json(raw)

    def history_entries(self) -> list[ConfigHistoryEntry]:
        """Every recorded change, oldest first."""
        entries = [
            ConfigHistoryEntry.model_validate_json(raw)
            for raw in self._state.store.hgetall(self._history_table).values()
        ]
        return sorted(entries, key=lambda e: e.checkpoint)
