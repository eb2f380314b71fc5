"""
Shared constants for the EcoReward engine.

Defaults mirror the parameters the reward distributor was first
deployed with.
"""

# Smallest internal denomination of the reward token.
MICRO_UNIT = 1_000_000

# Quality scores are integers in [QUALITY_SCORE_MIN, QUALITY_SCORE_MAX].
QUALITY_SCORE_MIN = 0
QUALITY_SCORE_MAX = 100

# Width of one quality tier: 0-33, 34-67, 68-100.
TIER_WIDTH = 34
TIER_COUNT = 3

# Percentages are expressed as integers where 100 == 1.0x.
PERCENT_DENOMINATOR = 100

DEFAULT_BASE_RATE = 100
DEFAULT_CARBON_MULTIPLIER = 50
DEFAULT_WATER_MULTIPLIER = 30
DEFAULT_YIELD_MULTIPLIER = 20
DEFAULT_QUALITY_THRESHOLD = 50
DEFAULT_TIER_MULTIPLIERS = (100, 150, 200)

DEFAULT_MAX_STAKE_MULTIPLIER = 200
DEFAULT_GENESIS_CHECKPOINT = 1000

DEFAULT_OWNER = "deployer"
DEFAULT_VERIFICATION_SERVICE = "data-verifier"
DEFAULT_STAKING_SERVICE = "staking-pool"
DEFAULT_TOKEN_SERVICE = "eco-token"

# Error codes, stable across releases.
ERR_NOT_AUTHORIZED = 100
ERR_INVALID_SUBMISSION = 101
ERR_ALREADY_REWARDED = 102
ERR_INVALID_AMOUNT = 103
ERR_CONFIG_UPDATE_FAILED = 104
ERR_PAUSED = 105
ERR_INVALID_MULTIPLIER = 106
ERR_TOKEN_TRANSFER_FAILED = 107
ERR_DATA_NOT_VERIFIED = 108
ERR_INVALID_QUALITY_SCORE = 109
ERR_ZERO_REWARD = 110
ERR_REENTRANT_SETTLEMENT = 111
