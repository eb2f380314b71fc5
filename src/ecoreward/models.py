"""
Data model for the EcoReward engine.

Every entity is a pydantic model. Records that must never change after
they are written (ledger entries, config snapshots) are frozen.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator

from ecoreward.constants import (
    DEFAULT_BASE_RATE,
    DEFAULT_CARBON_MULTIPLIER,
    DEFAULT_OWNER,
    DEFAULT_QUALITY_THRESHOLD,
    DEFAULT_STAKING_SERVICE,
    DEFAULT_TIER_MULTIPLIERS,
    DEFAULT_TOKEN_SERVICE,
    DEFAULT_VERIFICATION_SERVICE,
    DEFAULT_WATER_MULTIPLIER,
    DEFAULT_YIELD_MULTIPLIER,
    QUALITY_SCORE_MAX,
    QUALITY_SCORE_MIN,
)


def _as_identifier(value: object) -> object:
    """Accept integer ids from callers and store them as strings."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class ImpactMetrics(BaseModel):
    """Impact quantities reported by the verification service."""

    model_config = ConfigDict(frozen=True)

    carbon_sequestered: int = Field(default=0, ge=0)
    water_saved: int = Field(default=0, ge=0)
    yield_increase: int = Field(default=0, ge=0)


class VerifiedSubmission(BaseModel):
    """Authoritative fact record for one submission.

    Owned by the verification service and read fresh on every
    settlement attempt.
    """

    model_config = ConfigDict(frozen=True)

    submission_id: str = Field(min_length=1)
    quality_score: int = Field(ge=QUALITY_SCORE_MIN, le=QUALITY_SCORE_MAX)
    impact_metrics: ImpactMetrics = Field(default_factory=ImpactMetrics)
    contributor_id: str = Field(min_length=1)

    @field_validator("submission_id", mode="before")
    @classmethod
    def _normalize_submission_id(cls, value: object) -> object:
        return _as_identifier(value)


class RewardConfig(BaseModel):
    """Reward formula parameters.

    ``tier_multipliers`` holds one percentage per quality tier. The
    owner-facing setters only accept exactly three entries.
    """

    model_config = ConfigDict(frozen=True)

    base_rate: int = Field(default=DEFAULT_BASE_RATE, ge=0)
    carbon_multiplier: int = Field(default=DEFAULT_CARBON_MULTIPLIER, ge=0)
    water_multiplier: int = Field(default=DEFAULT_WATER_MULTIPLIER, ge=0)
    yield_multiplier: int = Field(default=DEFAULT_YIELD_MULTIPLIER, ge=0)
    quality_threshold: int = Field(
        default=DEFAULT_QUALITY_THRESHOLD, ge=QUALITY_SCORE_MIN, le=QUALITY_SCORE_MAX
    )
    tier_multipliers: tuple[NonNegativeInt, ...] = DEFAULT_TIER_MULTIPLIERS


class ConfigHistoryEntry(BaseModel):
    """Snapshot of the reward config right after a change took effect."""

    model_config = ConfigDict(frozen=True)

    checkpoint: int = Field(ge=0)
    change: Literal["config", "tiers"]
    base_rate: int
    carbon_multiplier: int
    water_multiplier: int
    yield_multiplier: int
    quality_threshold: int
    tier_multipliers: tuple[int, ...]
    changed_by: str

    @classmethod
    def from_config(
        cls,
        config: RewardConfig,
        checkpoint: int,
        change: Literal["config", "tiers"],
        changed_by: str,
    ) -> "ConfigHistoryEntry":
        return cls(
            checkpoint=checkpoint,
            change=change,
            changed_by=changed_by,
            **config.model_dump(),
        )


class SubmissionRecord(BaseModel):
    """Payment record for one submission. Immutable once ``rewarded``."""

    model_config = ConfigDict(frozen=True)

    submission_id: str
    rewarded: bool = False
    amount: int = Field(default=0, ge=0)
    checkpoint: int = Field(default=0, ge=0)


class FarmerHistory(BaseModel):
    """Running totals for one contributor."""

    model_config = ConfigDict(frozen=True)

    contributor_id: str
    total_rewards: int = Field(default=0, ge=0)
    last_claim_checkpoint: int = Field(default=0, ge=0)
    submission_count: int = Field(default=0, ge=0)


class ServiceAddresses(BaseModel):
    """Addresses of the three collaborator services."""

    model_config = ConfigDict(frozen=True)

    verification: str = Field(default=DEFAULT_VERIFICATION_SERVICE, min_length=1)
    staking: str = Field(default=DEFAULT_STAKING_SERVICE, min_length=1)
    token: str = Field(default=DEFAULT_TOKEN_SERVICE, min_length=1)


class GlobalState(BaseModel):
    """Point-in-time view of the engine's scalar globals."""

    owner_id: str = DEFAULT_OWNER
    paused: bool = False
    total_rewards_distributed: int = Field(default=0, ge=0)
    checkpoint: int = Field(default=0, ge=0)
    services: ServiceAddresses = Field(default_factory=ServiceAddresses)


class RewardBreakdown(BaseModel):
    """Every intermediate value of one reward computation."""

    model_config = ConfigDict(frozen=True)

    quality_score: int
    subtotal: int
    tier_index: int
    tier_multiplier: int
    tiered: int
    stake_multiplier: int
    final: int
    micro_unit: int
    amount: int
    submission_id: Optional[str] = None
    contributor_id: Optional[str] = None
