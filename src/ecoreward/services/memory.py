"""
In-memory collaborator services.

Process-local stand-ins for the verification, staking and token
services. Used by tests, the CLI demo and single-process setups.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Mapping, Optional

from ecoreward.models import VerifiedSubmission


class InMemoryVerificationService:
    """Holds verified submissions in a dict and tracks settlement marks."""

    def __init__(self, submissions: Iterable[VerifiedSubmission] = ()) -> None:
        self._submissions: dict[str, VerifiedSubmission] = {}
        self.rewarded: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.accept_marks = True
        for submission in submissions:
            self.add(submission)

    def add(self, submission: VerifiedSubmission) -> None:
        self._submissions[submission.submission_id] = submission

    def get_verified_data(self, submission_id: str) -> Optional[VerifiedSubmission]:
        self.calls.append(("get_verified_data", submission_id))
        return self._submissions.get(submission_id)

    def mark_rewarded(self, submission_id: str) -> bool:
        self.calls.append(("mark_rewarded", submission_id))
        if not self.accept_marks:
            return False
        self.rewarded.add(submission_id)
        return True


class StaticStakingService:
    """Returns a fixed stake multiplier, optionally per contributor."""

    def __init__(
        self,
        default_multiplier: int = 100,
        multipliers: Optional[Mapping[str, int]] = None,
    ) -> None:
        self.default_multiplier = default_multiplier
        self._multipliers: dict[str, int] = dict(multipliers or {})
        self.calls: list[str] = []

    def set_multiplier(self, contributor_id: str, multiplier: int) -> None:
        self._multipliers[contributor_id] = multiplier

    def get_stake_multiplier(self, contributor_id: str) -> int:
        self.calls.append(contributor_id)
        return self._multipliers.get(contributor_id, self.default_multiplier)


class InMemoryTokenService:
    """Keeps token balances in a dict."""

    def __init__(self) -> None:
        self.balances: dict[str, int] = defaultdict(int)
        self.total_supply = 0
        self.declines = False
        self.calls: list[tuple[int, str]] = []

    def mint(self, amount: int, recipient_id: str) -> bool:
        self.calls.append((amount, recipient_id))
        if self.declines:
            return False
        self.balances[recipient_id] += amount
        self.total_supply += amount
        return True
