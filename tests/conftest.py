"""Shared fixtures for EcoReward tests."""

import pytest

from ecoreward.config import EngineSettings
from ecoreward.distributor import RewardDistributor
from ecoreward.models import ImpactMetrics, VerifiedSubmission
from ecoreward.observability.metrics import MetricsCollector
from ecoreward.services import (
    InMemoryTokenService,
    InMemoryVerificationService,
    ServiceDirectory,
    StaticStakingService,
)


@pytest.fixture
def make_submission():
    """Factory for verified submissions; defaults follow the worked example."""

    def _make(
        submission_id="sub-1",
        quality_score=80,
        carbon=10,
        water=5,
        yield_increase=15,
        contributor_id="farmer-1",
    ) -> VerifiedSubmission:
        return VerifiedSubmission(
            submission_id=submission_id,
            quality_score=quality_score,
            impact_metrics=ImpactMetrics(
                carbon_sequestered=carbon,
                water_saved=water,
                yield_increase=yield_increase,
            ),
            contributor_id=contributor_id,
        )

    return _make


@pytest.fixture
def verifier(make_submission):
    return InMemoryVerificationService([make_submission()])


@pytest.fixture
def staking():
    return StaticStakingService(default_multiplier=150)


@pytest.fixture
def token():
    return InMemoryTokenService()


@pytest.fixture
def directory(verifier, staking, token):
    return ServiceDirectory({
        "data-verifier": verifier,
        "staking-pool": staking,
        "eco-token": token,
    })


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def distributor(directory, metrics):
    """Distributor with ``micro_unit=1`` so the worked example pays 3150.

    The checkpoint counter starts at 0 to keep expected values short.
    """
    return RewardDistributor(
        settings=EngineSettings(micro_unit=1, genesis_checkpoint=0),
        directory=directory,
        metrics=metrics,
    )
