"""
Access control and the global pause switch.

A single owner identity gates every administrative mutation. Ownership
can be handed over by the current owner and takes effect immediately.
"""

from __future__ import annotations

import logging

from ecoreward.exceptions import ConfigUpdateFailedError, NotAuthorizedError
from ecoreward.state import OWNER, PAUSED, EngineState
from ecoreward.storage import UnitOfWork

logger = logging.getLogger(__name__)


class AccessController:
    """Single-owner gate for administrative operations."""

    def __init__(self, state: EngineState) -> None:
        self._state = state

    @property
    def owner(self) -> str:
        return self._state.owner

    def is_owner(self, caller: str) -> bool:
        owner = self._state.owner
        return bool(owner) and caller == owner

    def require_owner(self, caller: str) -> None:
        """Raise ``NotAuthorizedError`` unless ``caller`` is the owner."""
        if not self.is_owner(caller):
            raise NotAuthorizedError(f"{caller!r} is not the owner")

    def transfer_ownership(self, new_owner: str, caller: str) -> str:
        """Hand ownership to ``new_owner``.

        Returns:
            The previous owner id.

        Raises:
            NotAuthorizedError: If ``caller`` is not the current owner.
            ConfigUpdateFailedError: If ``new_owner`` is empty.
        """
        self.require_owner(caller)
        if not isinstance(new_owner, str) or not new_owner.strip():
            raise ConfigUpdateFailedError("New owner id must be a non-empty string")

        previous = self._state.owner
        with UnitOfWork(self._state.store) as uow:
            uow.set(self._state.key(OWNER), new_owner)
        logger.info("Ownership transferred from %s to %s", previous, new_owner)
        return previous


class PauseSwitch:
    """Global kill switch checked before any settlement work."""

    def __init__(self, state: EngineState, access: AccessController) -> None:
        self._state = state
        self._access = access

    def is_paused(self) -> bool:
        return self._state.paused

    def set(self, paused: bool, caller: str) -> None:
        """Set the paused flag (owner only)."""
        self._access.require_owner(caller)
        with UnitOfWork(self._state.store) as uow:
            uow.set(self._state.key(PAUSED), "1" if paused else "0")
        logger.info("Distribution %s by %s", "paused" if paused else "unpaused", caller)
