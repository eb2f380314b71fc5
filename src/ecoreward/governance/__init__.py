"""
Governance

Owner access control, pause switch, versioned reward configuration
and the audit trail.
"""

from .access import AccessController, PauseSwitch
from .audit import AuditEntry, AuditLog
from .config_store import ConfigStore, build_config

__all__ = [
    "AccessController",
    "PauseSwitch",
    "AuditEntry",
    "AuditLog",
    "ConfigStore",
    "build_config",
]
