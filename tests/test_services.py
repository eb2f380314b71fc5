"""Tests for collaborator interfaces, the service directory and in-memory services."""

import pytest

from ecoreward.exceptions import ServiceUnavailableError
from ecoreward.services import (
    InMemoryTokenService,
    InMemoryVerificationService,
    ServiceDirectory,
    StakingService,
    StaticStakingService,
    TokenService,
    VerificationService,
)


class TestProtocols:
    """Test collaborator protocol checks."""

    def test_in_memory_services_satisfy_protocols(self):
        """Test in-memory services satisfy their protocols."""
        assert isinstance(InMemoryVerificationService(), VerificationService)
        assert isinstance(StaticStakingService(), StakingService)
        assert isinstance(InMemoryTokenService(), TokenService)

    def test_unrelated_object_does_not(self):
        """Test unrelated objects fail the protocol check."""
        assert not isinstance(object(), TokenService)
        assert not isinstance(InMemoryTokenService(), StakingService)


class TestServiceDirectory:
    """Test address resolution."""

    def test_register_and_resolve(self):
        """Test a registered service resolves."""
        token = InMemoryTokenService()
        directory = ServiceDirectory()
        directory.register("eco-token", token)
        assert directory.resolve("eco-token") is token
        assert "eco-token" in directory
        assert directory.addresses() == ["eco-token"]

    def test_unknown_address(self):
        """Test an unknown address raises ServiceUnavailableError."""
        with pytest.raises(ServiceUnavailableError, match="nowhere"):
            ServiceDirectory().resolve("nowhere")

    def test_unregister(self):
        """Test unregistering an address."""
        directory = ServiceDirectory({"a": object()})
        assert directory.unregister("a")
        assert not directory.unregister("a")
        assert "a" not in directory


class TestInMemoryServices:
    """Test the in-memory collaborators."""

    def test_verification(self, make_submission):
        """Test verification lookups and settlement marks."""
        verifier = InMemoryVerificationService([make_submission()])
        assert verifier.get_verified_data("sub-1").contributor_id == "farmer-1"
        assert verifier.get_verified_data("other") is None
        assert verifier.mark_rewarded("sub-1")
        assert verifier.rewarded == {"sub-1"}

    def test_verification_can_refuse_marks(self):
        """Test the verifier can refuse marks."""
        verifier = InMemoryVerificationService()
        verifier.accept_marks = False
        assert verifier.mark_rewarded("sub-1") is False
        assert verifier.rewarded == set()

    def test_staking(self):
        """Test default and per-contributor multipliers."""
        staking = StaticStakingService(default_multiplier=120, multipliers={"vip": 200})
        assert staking.get_stake_multiplier("vip") == 200
        assert staking.get_stake_multiplier("anyone") == 120
        assert staking.calls == ["vip", "anyone"]

    def test_token(self):
        """Test minting updates balances and supply."""
        token = InMemoryTokenService()
        assert token.mint(10, "a")
        assert token.mint(5, "a")
        assert token.balances["a"] == 15
        assert token.total_supply == 15

        token.declines = True
        assert token.mint(1, "a") is False
        assert token.total_supply == 15
