"""
EcoReward CLI

Command-line interface for EcoReward.
"""

from .main import app

__all__ = ["app"]
