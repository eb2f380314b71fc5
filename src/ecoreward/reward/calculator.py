"""
Reward Calculator.

Pure integer reward formula. Blends a flat base rate with metric
bonuses, then scales by the quality-tier multiplier and the stake
multiplier, truncating at every step:

    subtotal = base + carbon * cm + water * wm + yield * ym
    tiered   = subtotal * tier_multipliers[quality // 34] // 100
    final    = tiered * stake_multiplier // 100
    amount   = final // micro_unit

The last division converts out of the micro denomination. With the
default ``MICRO_UNIT`` of 1,000,000 and the default multipliers, most
realistic submissions truncate to zero here; the divisor looks scaled
inconsistently with the rest of the formula. It is kept as-is for
compatibility with already-settled rewards and surfaced through
``ZeroRewardError`` by the orchestrator rather than rescaled.
"""

from __future__ import annotations

from ecoreward.constants import (
    MICRO_UNIT,
    PERCENT_DENOMINATOR,
    QUALITY_SCORE_MAX,
    QUALITY_SCORE_MIN,
    TIER_WIDTH,
)
from ecoreward.exceptions import InvalidQualityScoreError
from ecoreward.models import ImpactMetrics, RewardBreakdown, RewardConfig


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class RewardCalculator:
    """Computes reward amounts. Holds no state besides ``micro_unit``."""

    def __init__(self, micro_unit: int = MICRO_UNIT) -> None:
        if not _is_int(micro_unit) or micro_unit <= 0:
            raise ValueError(f"micro_unit must be a positive integer, got {micro_unit!r}")
        self.micro_unit = micro_unit

    @staticmethod
    def tier_index(quality_score: int) -> int:
        """Map a quality score to its tier: 0-33 -> 0, 34-67 -> 1, 68-100 -> 2.

        Raises:
            InvalidQualityScoreError: If the score is not an integer in [0, 100].
        """
        if not _is_int(quality_score) or not (
            QUALITY_SCORE_MIN <= quality_score <= QUALITY_SCORE_MAX
        ):
            raise InvalidQualityScoreError(
                f"Quality score must be an integer in "
                f"[{QUALITY_SCORE_MIN}, {QUALITY_SCORE_MAX}], got {quality_score!r}"
            )
        return quality_score // TIER_WIDTH

    def breakdown(
        self,
        quality_score: int,
        metrics: ImpactMetrics,
        stake_multiplier: int,
        config: RewardConfig,
    ) -> RewardBreakdown:
        """Compute the reward and every intermediate value.

        Args:
            quality_score: Verified quality score, 0-100.
            metrics: Impact metrics of the submission.
            stake_multiplier: Stake percentage (100 == 1.0x).
            config: Reward parameters to apply.

        Returns:
            A ``RewardBreakdown``; ``amount`` may be zero.

        Raises:
            InvalidQualityScoreError: If the score is out of range or its
                tier is missing from ``config.tier_multipliers``.
        """
        index = self.tier_index(quality_score)
        if index >= len(config.tier_multipliers):
            raise InvalidQualityScoreError(
                f"Quality score {quality_score} maps to tier {index} but only "
                f"{len(config.tier_multipliers)} tier multipliers are configured"
            )
        tier_multiplier = config.tier_multipliers[index]

        subtotal = (
            config.base_rate
            + metrics.carbon_sequestered * config.carbon_multiplier
            + metrics.water_saved * config.water_multiplier
            + metrics.yield_increase * config.yield_multiplier
        )
        tiered = subtotal * tier_multiplier // PERCENT_DENOMINATOR
        final = tiered * stake_multiplier // PERCENT_DENOMINATOR
        amount = final // self.micro_unit

        return RewardBreakdown(
            quality_score=quality_score,
            subtotal=subtotal,
            tier_index=index,
            tier_multiplier=tier_multiplier,
            tiered=tiered,
            stake_multiplier=stake_multiplier,
            final=final,
            micro_unit=self.micro_unit,
            amount=amount,
        )

    def compute(
        self,
        quality_score: int,
        metrics: ImpactMetrics,
        stake_multiplier: int,
        config: RewardConfig,
    ) -> int:
        """Return the reward amount in settlement units (may be zero)."""
        return self.breakdown(quality_score, metrics, stake_multiplier, config).amount
