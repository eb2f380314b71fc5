"""
EcoReward - Reward distribution for verified agricultural impact data

Calculator · Ledger · Settlement · Governance

EcoReward pays contributors ("farmers") for externally verified data
submissions, exactly once per submission, with a reward that blends a
base rate, impact bonuses, a quality tier and a stake multiplier.

Version: 0.1.0
"""

__version__ = "0.1.0"

# Data model
from .models import (
    ImpactMetrics,
    VerifiedSubmission,
    RewardConfig,
    ConfigHistoryEntry,
    SubmissionRecord,
    FarmerHistory,
    ServiceAddresses,
    GlobalState,
    RewardBreakdown,
)

# Settings
from .config import EngineSettings, load_settings

# Reward computation and records
from .reward import RewardCalculator, SubmissionLedger, FarmerHistoryTracker

# Governance
from .governance import AccessController, PauseSwitch, ConfigStore, AuditLog, AuditEntry

# Collaborators
from .services import (
    VerificationService,
    StakingService,
    TokenService,
    ServiceDirectory,
    InMemoryVerificationService,
    StaticStakingService,
    InMemoryTokenService,
)

# Settlement
from .settlement import DistributionOrchestrator
from .distributor import RewardDistributor

# Exceptions
from .exceptions import (
    EcoRewardError,
    SettlementError,
    NotAuthorizedError,
    InvalidSubmissionError,
    AlreadyRewardedError,
    InvalidAmountError,
    ConfigUpdateFailedError,
    PausedError,
    InvalidMultiplierError,
    TokenTransferFailedError,
    DataNotVerifiedError,
    InvalidQualityScoreError,
    ZeroRewardError,
    ReentrantSettlementError,
    StorageError,
    ServiceUnavailableError,
)

__all__ = [
    # Version
    "__version__",
    # Data model
    "ImpactMetrics",
    "VerifiedSubmission",
    "RewardConfig",
    "ConfigHistoryEntry",
    "SubmissionRecord",
    "FarmerHistory",
    "ServiceAddresses",
    "GlobalState",
    "RewardBreakdown",
    # Settings
    "EngineSettings",
    "load_settings",
    # Reward
    "RewardCalculator",
    "SubmissionLedger",
    "FarmerHistoryTracker",
    # Governance
    "AccessController",
    "PauseSwitch",
    "ConfigStore",
    "AuditLog",
    "AuditEntry",
    # Collaborators
    "VerificationService",
    "StakingService",
    "TokenService",
    "ServiceDirectory",
    "InMemoryVerificationService",
    "StaticStakingService",
    "InMemoryTokenService",
    # Settlement
    "DistributionOrchestrator",
    "RewardDistributor",
    # Exceptions
    "EcoRewardError",
    "SettlementError",
    "NotAuthorizedError",
    "InvalidSubmissionError",
    "AlreadyRewardedError",
    "InvalidAmountError",
    "ConfigUpdateFailedError",
    "PausedError",
    "InvalidMultiplierError",
    "TokenTransferFailedError",
    "DataNotVerifiedError",
    "InvalidQualityScoreError",
    "ZeroRewardError",
    "ReentrantSettlementError",
    "StorageError",
    "ServiceUnavailableError",
]
