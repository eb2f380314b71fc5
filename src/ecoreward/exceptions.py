# Copyright (c) EcoReward Contributors. All rights reserved.
# Licensed under the MIT License.
"""Centralized exception hierarchy for EcoReward.

All EcoReward exceptions inherit from EcoRewardError. Settlement and
administrative failures derive from SettlementError and carry a stable
integer ``code`` that callers can surface unchanged.
"""

from ecoreward.constants import (
    ERR_ALREADY_REWARDED,
    ERR_CONFIG_UPDATE_FAILED,
    ERR_DATA_NOT_VERIFIED,
    ERR_INVALID_AMOUNT,
    ERR_INVALID_MULTIPLIER,
    ERR_INVALID_QUALITY_SCORE,
    ERR_INVALID_SUBMISSION,
    ERR_NOT_AUTHORIZED,
    ERR_PAUSED,
    ERR_REENTRANT_SETTLEMENT,
    ERR_TOKEN_TRANSFER_FAILED,
    ERR_ZERO_REWARD,
)


class EcoRewardError(Exception):
    """Base exception for all EcoReward errors."""


class SettlementError(EcoRewardError):
    """A recoverable rejection of a settlement or administrative call."""

    code: int = 0

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.__class__.__name__)


class NotAuthorizedError(SettlementError):
    """Caller is not the current owner."""

    code = ERR_NOT_AUTHORIZED


class InvalidSubmissionError(SettlementError):
    """Verified submission is unavailable or malformed."""

    code = ERR_INVALID_SUBMISSION


class AlreadyRewardedError(SettlementError):
    """Submission has already been paid."""

    code = ERR_ALREADY_REWARDED


class InvalidAmountError(SettlementError):
    """Amount is not a positive integer."""

    code = ERR_INVALID_AMOUNT


class ConfigUpdateFailedError(SettlementError):
    """Configuration value was rejected."""

    code = ERR_CONFIG_UPDATE_FAILED


class PausedError(SettlementError):
    """Distribution is paused."""

    code = ERR_PAUSED


class InvalidMultiplierError(SettlementError):
    """Stake multiplier is unavailable or out of range."""

    code = ERR_INVALID_MULTIPLIER


class TokenTransferFailedError(SettlementError):
    """Token service declined to mint."""

    code = ERR_TOKEN_TRANSFER_FAILED


class DataNotVerifiedError(SettlementError):
    """Quality score is below the configured threshold."""

    code = ERR_DATA_NOT_VERIFIED


class InvalidQualityScoreError(SettlementError):
    """Quality score does not map to a configured tier."""

    code = ERR_INVALID_QUALITY_SCORE


class ZeroRewardError(SettlementError):
    """Computed reward truncated to zero."""

    code = ERR_ZERO_REWARD


class ReentrantSettlementError(SettlementError):
    """Settlement was re-entered while another one was in progress."""

    code = ERR_REENTRANT_SETTLEMENT


class StorageError(EcoRewardError):
    """Errors related to state store operations."""


class ServiceUnavailableError(EcoRewardError):
    """No collaborator is registered at the requested address."""


__all__ = [
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
