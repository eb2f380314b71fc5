# Copyright (c) EcoReward Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Collaborator service interfaces.

The engine depends only on these protocols; concrete bindings are
resolved through a ``ServiceDirectory``.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Union, runtime_checkable

from ecoreward.models import VerifiedSubmission


@runtime_checkable
class VerificationService(Protocol):
    """Source of verified submission facts."""

    def get_verified_data(
        self, submission_id: str
    ) -> Optional[Union[VerifiedSubmission, Mapping[str, Any]]]: ...

    def mark_rewarded(self, submission_id: str) -> bool: ...


@runtime_checkable
class StakingService(Protocol):
    """Source of stake multipliers (percentages, 100 == 1.0x)."""

    def get_stake_multiplier(self, contributor_id: str) -> int: ...


@runtime_checkable
class TokenService(Protocol):
    """Mints reward tokens."""

    def mint(self, amount: int, recipient_id: str) -> bool: ...
