"""Registry backend interfaces and implementations."""

from __future__ import annotations

import json
import logging
import subprocess
import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import yaml

logger = logging.getLogger(__name__)


class RegistryValueNotFound(LookupError):
    """Raised when the key or the value name does not exist."""


class RegistryAccessError(RuntimeError):
    """Raised when a registry query fails for a reason other than absence."""


class BackendUnavailableError(RuntimeError):
    """Raised when a backend cannot run on the current platform."""


class SnapshotError(RuntimeError):
    """Raised when a registry snapshot file cannot be loaded."""


_HIVE_ALIASES = {
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
    "HKCU": "HKEY_CURRENT_USER",
    "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
    "HKU": "HKEY_USERS",
    "HKEY_USERS": "HKEY_USERS",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKEY_CLASSES_ROOT": "HKEY_CLASSES_ROOT",
}


def split_hive(path: str) -> Tuple[str, str]:
    """Split ``HKLM:\\Software\\X`` into ``("HKEY_LOCAL_MACHINE", "Software\\X")``.

    Raises :class:`RegistryAccessError` for an unknown hive.
    """

    head, _, subkey = path.replace("/", "\\").partition("\\")
    hive = _HIVE_ALIASES.get(head.rstrip(":").upper())
    if hive is None:
        raise RegistryAccessError(f"Unsupported registry hive in path: {path}")
    return hive, subkey.strip("\\")


class RegistryBackend(ABC):
    """Abstract base class describing a read-only registry store."""

    @abstractmethod
    def read_value(self, path: str, name: str) -> Any:
        """Return the raw value stored under ``path`` as ``name``.

        Implementations raise :class:`RegistryValueNotFound` when the key or
        value does not exist and :class:`RegistryAccessError` for other
        failures.
        """


class WinRegBackend(RegistryBackend):
    """Backend reading the local registry through :mod:`winreg`."""

    def __init__(self) -> None:
        if sys.platform != "win32":
            raise BackendUnavailableError("The winreg backend is only available on Windows")
        import winreg

        self._winreg = winreg

    # ------------------------------------------------------------------
    def read_value(self, path: str, name: str) -> Any:
        hive_name, subkey = split_hive(path)
        hive = getattr(self._winreg, hive_name)
        # 64-bit view regardless of interpreter bitness.
        access = self._winreg.KEY_READ | self._winreg.KEY_WOW64_64KEY

        try:
            with self._winreg.OpenKey(hive, subkey, 0, access) as key:
                value, _value_type = self._winreg.QueryValueEx(key, name)
        except FileNotFoundError as exc:
            raise RegistryValueNotFound(f"{path} -> {name}") from exc
        except OSError as exc:
            raise RegistryAccessError(exc.strerror or str(exc)) from exc

        return value


# PowerShell emits a one-line JSON status document so that "absent" can be told
# apart from every other failure without parsing localized error text.
_POWERSHELL_SCRIPT = """
$ErrorActionPreference = 'Stop'
try {{
    $item = Get-ItemProperty -LiteralPath '{path}' -Name '{name}'
    $value = $item.'{name}'
    if ($value -is [byte[]]) {{ $value = [int[]]$value }}
    if ($value -is [int]) {{ $value = [BitConverter]::ToUInt32([BitConverter]::GetBytes($value), 0) }}
    ConvertTo-Json -Compress -Depth 3 @{{ status = 'present'; value = $value }}
}} catch [System.Management.Automation.ItemNotFoundException] {{
    ConvertTo-Json -Compress @{{ status = 'absent' }}
}} catch [System.Management.Automation.PSArgumentException] {{
    ConvertTo-Json -Compress @{{ status = 'absent' }}
}} catch {{
    ConvertTo-Json -Compress @{{ status = 'error'; message = $_.Exception.Message }}
}}
"""


class PowerShellRegistryBackend(RegistryBackend):
    """Backend that shells out to PowerShell's ``Get-ItemProperty``."""

    def __init__(self, *, powershell_bin: str = "powershell", timeout: float | None = 30.0) -> None:
        self.powershell_bin = powershell_bin
        self.timeout = timeout

    # ------------------------------------------------------------------
    def read_value(self, path: str, name: str) -> Any:
        command = self._build_command(path, name)
        logger.debug("Querying %s -> %s with %s", path, name, self.powershell_bin)

        try:
            result = subprocess.run(  # noqa: S603 - deliberate invocation of external command
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise RegistryAccessError(f"Executable not found: {self.powershell_bin}") from exc
        except subprocess.TimeoutExpired as exc:
            raise RegistryAccessError(
                f"Registry query timed out after {self.timeout} seconds"
            ) from exc

        if result.returncode != 0:
            raise RegistryAccessError(result.stderr.strip() or "PowerShell execution failed")

        return self._parse_output(result.stdout, path, name)

    # ------------------------------------------------------------------
    def _build_command(self, path: str, name: str) -> List[str]:
        script = _POWERSHELL_SCRIPT.format(path=_quote(path), name=_quote(name))
        return [self.powershell_bin, "-NoProfile", "-NonInteractive", "-Command", script]

    def _parse_output(self, stdout: str, path: str, name: str) -> Any:
        try:
            data = json.loads(stdout.strip() or "{}")
        except json.JSONDecodeError as exc:
            raise RegistryAccessError("Failed to parse PowerShell output") from exc

        status = data.get("status") if isinstance(data, Mapping) else None
        if status == "present":
            return data.get("value")
        if status == "absent":
            raise RegistryValueNotFound(f"{path} -> {name}")
        if status == "error":
            raise RegistryAccessError(str(data.get("message") or "Unknown PowerShell error"))

        raise RegistryAccessError("Unexpected PowerShell output")


def _quote(text: str) -> str:
    return text.replace("'", "''")


class InMemoryRegistry(RegistryBackend):
    """Dictionary-backed registry store used for snapshots and tests.

    Key paths and value names are matched case-insensitively, as on Windows.
    Paths are normalized to their full hive name, so ``HKLM:\\X`` and
    ``HKEY_LOCAL_MACHINE\\X`` address the same key.
    """

    def __init__(
        self,
        keys: Mapping[str, Mapping[str, Any] | None] | None = None,
        *,
        denied: Iterable[str] = (),
    ) -> None:
        self._keys: Dict[str, Dict[str, Any]] = {}
        self._denied = {self._key(path) for path in denied}
        for path, values in (keys or {}).items():
            self._keys.setdefault(self._key(path), {})
            for name, value in (values or {}).items():
                self.set_value(path, name, value)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "InMemoryRegistry":
        """Build a store from ``{"keys": {path: {name: value}}, "denied": [path]}``."""

        keys = data.get("keys") or {}
        denied = data.get("denied") or []
        if not isinstance(keys, Mapping) or not all(
            v is None or isinstance(v, Mapping) for v in keys.values()
        ):
            raise SnapshotError("'keys' must map key paths to value mappings")
        if not isinstance(denied, list):
            raise SnapshotError("'denied' must be a list of key paths")
        return cls(keys, denied=[str(path) for path in denied])

    # ------------------------------------------------------------------
    def set_value(self, path: str, name: str, value: Any) -> None:
        self._keys.setdefault(self._key(path), {})[str(name).lower()] = value

    def deny(self, path: str) -> None:
        self._denied.add(self._key(path))

    def has_key(self, path: str) -> bool:
        return self._key(path) in self._keys

    # ------------------------------------------------------------------
    def read_value(self, path: str, name: str) -> Any:
        key = self._key(path)
        if key in self._denied:
            raise RegistryAccessError(f"Requested registry access is not allowed: {path}")

        values = self._keys.get(key)
        if values is None or name.lower() not in values:
            raise RegistryValueNotFound(f"{path} -> {name}")
        return values[name.lower()]

    # ------------------------------------------------------------------
    @staticmethod
    def _key(path: str) -> str:
        try:
            hive, subkey = split_hive(path)
        except RegistryAccessError:
            return path.strip("\\").lower()
        return f"{hive}\\{subkey}".lower()


def load_snapshot(path: Path | str) -> InMemoryRegistry:
    """Load an :class:`InMemoryRegistry` from a YAML or JSON snapshot file."""

    path = Path(path)
    if not path.exists():
        raise SnapshotError(f"Registry snapshot not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8-sig")) or {}
    except yaml.YAMLError as exc:
        raise SnapshotError(f"Invalid YAML in registry snapshot {path}") from exc

    if not isinstance(data, Mapping):
        raise SnapshotError(f"Registry snapshot must be a mapping: {path}")

    return InMemoryRegistry.from_mapping(data)


__all__ = [
    "BackendUnavailableError",
    "InMemoryRegistry",
    "PowerShellRegistryBackend",
    "RegistryAccessError",
    "RegistryBackend",
    "RegistryValueNotFound",
    "SnapshotError",
    "WinRegBackend",
    "load_snapshot",
    "split_hive",
]
