"""
Settlement workflow.

The orchestrator that turns one verified submission into one payment.
"""

from .orchestrator import DistributionOrchestrator

__all__ = [
    "DistributionOrchestrator",
]
