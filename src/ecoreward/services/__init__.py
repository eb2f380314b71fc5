"""
Collaborator Services

Capability interfaces for the verification, staking and token services,
the directory that resolves their addresses, and in-memory
implementations for tests, demos and the CLI.
"""

from .base import StakingService, TokenService, VerificationService
from .directory import ServiceDirectory
from .memory import (
    InMemoryTokenService,
    InMemoryVerificationService,
    StaticStakingService,
)

__all__ = [
    "VerificationService",
    "StakingService",
    "TokenService",
    "ServiceDirectory",
    "InMemoryVerificationService",
    "StaticStakingService",
    "InMemoryTokenService",
]
