"""Address-to-service resolution for collaborators."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ecoreward.exceptions import ServiceUnavailableError

logger = logging.getLogger(__name__)


class ServiceDirectory:
    """Maps collaborator addresses to service implementations.

    The engine stores only addresses; every settlement resolves the
    address that is current at that moment.
    """

    def __init__(self, services: Optional[Mapping[str, Any]] = None) -> None:
        self._services: dict[str, Any] = dict(services or {})

    def register(self, address: str, service: Any) -> None:
        """Register or replace the service reachable at ``address``."""
        self._services[address] = service
        logger.debug("Registered %s at %s", type(service).__name__, address)

    def unregister(self, address: str) -> bool:
        return self._services.pop(address, None) is not None

    def resolve(self, address: str) -> Any:
        """Return the service at ``address``.

        Raises:
            ServiceUnavailableError: If nothing is registered there.
        """
        try:
            return self._services[address]
        except KeyError:
            raise ServiceUnavailableError(f"No service registered at '{address}'") from None

    def __contains__(self, address: str) -> bool:
        return address in self._services

    def addresses(self) -> list[str]:
        return sorted(self._services)
