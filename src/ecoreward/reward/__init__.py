"""
Reward computation and bookkeeping.

The pure reward formula, the per-submission payment ledger and the
per-contributor running totals.
"""

from .calculator import RewardCalculator
from .history import FarmerHistoryTracker
from .ledger import SubmissionLedger

__all__ = [
    "RewardCalculator",
    "FarmerHistoryTracker",
    "SubmissionLedger",
]
