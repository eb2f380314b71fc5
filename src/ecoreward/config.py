"""
Engine settings.

Deployment-time configuration: the initial owner, reward parameters and
collaborator addresses, plus storage and formula constants. Loaded from
YAML or JSON files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ecoreward.constants import (
    DEFAULT_GENESIS_CHECKPOINT,
    DEFAULT_MAX_STAKE_MULTIPLIER,
    DEFAULT_OWNER,
    MICRO_UNIT,
    TIER_COUNT,
)
from ecoreward.exceptions import ConfigUpdateFailedError
from ecoreward.models import RewardConfig, ServiceAddresses
from ecoreward.storage import StorageConfig


class EngineSettings(BaseModel):
    """Settings a RewardDistributor is deployed with.

    ``reward``, ``owner`` and ``services`` only seed an empty state
    store; once state exists they are changed through the owner-gated
    operations instead.
    """

    owner: str = Field(default=DEFAULT_OWNER, min_length=1)
    genesis_checkpoint: int = Field(default=DEFAULT_GENESIS_CHECKPOINT, ge=0)
    micro_unit: int = Field(default=MICRO_UNIT, gt=0)
    max_stake_multiplier: int = Field(default=DEFAULT_MAX_STAKE_MULTIPLIER, ge=0)
    reward: RewardConfig = Field(default_factory=RewardConfig)
    services: ServiceAddresses = Field(default_factory=ServiceAddresses)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @field_validator("reward")
    @classmethod
    def _three_tiers(cls, value: RewardConfig) -> RewardConfig:
        if len(value.tier_multipliers) != TIER_COUNT:
            raise ValueError(f"tier_multipliers must have exactly {TIER_COUNT} entries")
        return value

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineSettings":
        """Validate a plain mapping into settings.

        Raises:
            ConfigUpdateFailedError: If the mapping is not valid settings.
        """
        try:
            return cls.model_validate(data or {})
        except ValidationError as exc:
            raise ConfigUpdateFailedError(f"Invalid engine settings: {exc}") from exc


def load_settings(path: Union[str, Path]) -> EngineSettings:
    """Load settings from a ``.yaml``/``.yml`` or ``.json`` file."""
    path = Path(path)
    try:
        with open(path) as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigUpdateFailedError(f"Cannot read settings from {path}: {exc}") from exc

    if data is not None and not isinstance(data, dict):
        raise ConfigUpdateFailedError(f"Settings file {path} must contain a mapping")
    return EngineSettings.from_dict(data or {})
