"""
Tests for governance components.

Covers engine state seeding, access control, the pause switch and the
versioned config store.
"""

import pytest

from ecoreward.config import EngineSettings
from ecoreward.exceptions import ConfigUpdateFailedError, NotAuthorizedError
from ecoreward.governance import (
    AccessController,
    ConfigStore,
    PauseSwitch,
    build_config,
)
from ecoreward.models import RewardConfig
from ecoreward.state import EngineState
from ecoreward.storage import MemoryStateStore


@pytest.fixture
def state():
    store = MemoryStateStore()
    store.connect()
    state = EngineState(store)
    state.initialize(EngineSettings(owner="alice", genesis_checkpoint=10))
    return state


@pytest.fixture
def access(state):
    return AccessController(state)


@pytest.fixture
def config_store(state, access):
    return ConfigStore(state, access)


# ---------------------------------------------------------------------------
# Engine state
# ---------------------------------------------------------------------------

class TestEngineState:
    """Test seeding of engine globals."""

    def test_initialize_seeds_globals(self, state):
        """Test an empty store is seeded from settings."""
        snapshot = state.snapshot()
        assert snapshot.owner_id == "alice"
        assert snapshot.paused is False
        assert snapshot.total_rewards_distributed == 0
        assert snapshot.checkpoint == 10
        assert state.config == RewardConfig()

    def test_initialize_keeps_existing_state(self, state):
        """Test seeding never overwrites existing globals."""
        assert state.initialize(EngineSettings(owner="mallory", genesis_checkpoint=99)) is False
        assert state.owner == "alice"
        assert state.checkpoint == 10


# ---------------------------------------------------------------------------
# Access control
# ---------------------------------------------------------------------------

class TestAccessController:
    """Test the owner gate."""

    def test_owner_passes(self, access):
        """Test the owner passes the gate."""
        access.require_owner("alice")
        assert access.is_owner("alice")

    def test_non_owner_rejected(self, access):
        """Test anyone else is refused."""
        assert not access.is_owner("bob")
        with pytest.raises(NotAuthorizedError):
            access.require_owner("bob")

    def test_transfer_ownership(self, access):
        """Test ownership transfer."""
        assert access.transfer_ownership("bob", caller="alice") == "alice"
        assert access.owner == "bob"
        with pytest.raises(NotAuthorizedError):
            access.require_owner("alice")

    def test_transfer_requires_owner(self, access):
        """Test only the owner can transfer ownership."""
        with pytest.raises(NotAuthorizedError):
            access.transfer_ownership("bob", caller="bob")
        assert access.owner == "alice"

    @pytest.mark.parametrize("new_owner", ["", "   ", None])
    def test_transfer_rejects_empty_owner(self, access, new_owner):
        """Test an empty new owner is refused."""
        with pytest.raises(ConfigUpdateFailedError):
            access.transfer_ownership(new_owner, caller="alice")
        assert access.owner == "alice"


class TestPauseSwitch:
    """Test the pause switch."""

    def test_pause_and_unpause(self, state, access):
        """Test toggling the switch."""
        switch = PauseSwitch(state, access)
        assert not switch.is_paused()
        switch.set(True, caller="alice")
        assert switch.is_paused()
        switch.set(False, caller="alice")
        assert not switch.is_paused()

    def test_only_owner_can_pause(self, state, access):
        """Test only the owner can pause."""
        switch = PauseSwitch(state, access)
        with pytest.raises(NotAuthorizedError):
            switch.set(True, caller="bob")
        assert not switch.is_paused()


# ---------------------------------------------------------------------------
# Config store
# ---------------------------------------------------------------------------

class TestConfigStore:
    """Test the versioned config store."""

    def test_set_records_history_and_advances_checkpoint(self, config_store, state):
        """Test set records history and advances the checkpoint."""
        new = build_config(RewardConfig(), base_rate=250)
        entry = config_store.set(new, caller="alice")

        assert entry.checkpoint == 10
        assert entry.change == "config"
        assert entry.base_rate == 250
        assert entry.changed_by == "alice"
        assert state.checkpoint == 11
        assert config_store.get().base_rate == 250
        assert config_store.history(10) == entry

    def test_set_tiers(self, config_store):
        """Test set_tiers replaces only the tier list."""
        entry = config_store.set_tiers([100, 200, 300], caller="alice")
        assert entry.change == "tiers"
        assert config_store.get().tier_multipliers == (100, 200, 300)
        assert config_store.get().base_rate == 100

    @pytest.mark.parametrize("tiers", [[100, 150], [100, 150, 200, 250], "abc", 5])
    def test_set_tiers_requires_three_entries(self, config_store, state, tiers):
        """Test tier lists must hold exactly three entries."""
        with pytest.raises(ConfigUpdateFailedError):
            config_store.set_tiers(tiers, caller="alice")
        assert state.checkpoint == 10
        assert config_store.history_entries() == []

    def test_negative_tier_rejected(self, config_store):
        """Test negative tier multipliers are refused."""
        with pytest.raises(ConfigUpdateFailedError):
            config_store.set_tiers([100, -1, 200], caller="alice")

    def test_non_owner_checked_before_validation(self, config_store):
        """Test ownership is checked before input validation."""
        with pytest.raises(NotAuthorizedError):
            config_store.set_tiers([1], caller="bob")

    def test_set_rejects_wrong_tier_count(self, config_store):
        """Test set refuses a config with the wrong tier count."""
        with pytest.raises(ConfigUpdateFailedError):
            config_store.set(RewardConfig(tier_multipliers=(100,)), caller="alice")

    def test_history_is_append_only(self, config_store):
        """Test every change keeps its own history entry."""
        first = config_store.set(build_config(RewardConfig(), base_rate=1), caller="alice")
        config_store.set(build_config(RewardConfig(), base_rate=2), caller="alice")
        config_store.set_tiers([1, 2, 3], caller="alice")

        entries = config_store.history_entries()
        assert [e.checkpoint for e in entries] == [10, 11, 12]
        assert config_store.history(10) == first
        assert config_store.history(99) is None

    def test_build_config_validates(self):
        """Test build_config validates its updates."""
        with pytest.raises(ConfigUpdateFailedError):
            build_config(RewardConfig(), quality_threshold=101)
        with pytest.raises(ConfigUpdateFailedError):
            build_config(RewardConfig(), base_rate=-1)
