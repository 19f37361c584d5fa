"""Adapter layer for registry backends and value resolution."""

from .registry import (
    BackendUnavailableError,
    InMemoryRegistry,
    PowerShellRegistryBackend,
    RegistryAccessError,
    RegistryBackend,
    RegistryValueNotFound,
    SnapshotError,
    WinRegBackend,
    load_snapshot,
)
from .resolver import ValueResolver

__all__ = [
    "BackendUnavailableError",
    "InMemoryRegistry",
    "PowerShellRegistryBackend",
    "RegistryAccessError",
    "RegistryBackend",
    "RegistryValueNotFound",
    "SnapshotError",
    "ValueResolver",
    "WinRegBackend",
    "load_snapshot",
]
