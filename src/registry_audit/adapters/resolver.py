"""Resolve rule locators into present, absent or denied values."""

from __future__ import annotations

import logging
from typing import Any

from ..models import Absent, AccessDenied, Present, RegistryLocator, ResolvedValue
from .registry import RegistryAccessError, RegistryBackend, RegistryValueNotFound

logger = logging.getLogger(__name__)

NULL_VALUE = "NULL"


class ValueResolver:
    """Read the current value for a locator from a :class:`RegistryBackend`."""

    def __init__(self, backend: RegistryBackend) -> None:
        self.backend = backend

    def resolve(self, locator: RegistryLocator) -> ResolvedValue:
        """Return the value for ``locator``; every call queries the backend."""

        try:
            raw = self.backend.read_value(locator.path, locator.name)
        except RegistryValueNotFound:
            logger.debug("Registry value not found: %s", locator)
            return Absent()
        except RegistryAccessError as exc:
            logger.debug("Registry access error for %s: %s", locator, exc)
            return AccessDenied(detail=str(exc))
        except Exception as exc:  # noqa: BLE001 - any backend failure is an access failure
            logger.debug("Registry backend failure for %s", locator, exc_info=True)
            return AccessDenied(detail=str(exc) or type(exc).__name__)

        return Present(value=to_display_string(raw))


def to_display_string(value: Any) -> str:
    """Render a raw registry value the way it is compared and reported."""

    if value is None:
        return NULL_VALUE
    if isinstance(value, (bytes, bytearray)):
        return " ".join(str(octet) for octet in value)
    if isinstance(value, (list, tuple)):
        return " ".join(to_display_string(item) for item in value)
    if isinstance(value, bool):
        return str(int(value))
    return str(value)


__all__ = ["NULL_VALUE", "ValueResolver", "to_display_string"]
