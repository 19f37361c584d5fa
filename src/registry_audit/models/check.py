"""Check models shared by the evaluator and the reporting layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

NOT_AVAILABLE = "N/A"


class CheckStatus(str, Enum):
    """Outcome of a check. Evaluation errors are reported as ``FAIL``."""

    PASS = "PASS"
    FAIL = "FAIL"


@dataclass(frozen=True, slots=True)
class CheckDefinition:
    """A declarative assertion about system configuration."""

    id: str
    title: str
    description: str = ""
    compliance: Optional[str] = None
    remediation: Optional[str] = None
    rules: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Evaluation record produced for exactly one :class:`CheckDefinition`."""

    id: str
    title: str
    description: str = ""
    compliance: Optional[str] = None
    remediation: Optional[str] = None
    status: CheckStatus = CheckStatus.FAIL
    actual_value: str = NOT_AVAILABLE
    expected_value: str = NOT_AVAILABLE
    error: Optional[str] = None

    @property
    def has_error(self) -> bool:
        """Return ``True`` when the check could not be compared normally."""

        return self.error is not None
