"""Data models for check definitions, parsed rules and check results."""

from .check import CheckDefinition, CheckResult, CheckStatus
from .rule import (
    Absent,
    AccessDenied,
    Expectation,
    LiteralEquals,
    MustBeAbsent,
    NumericEquals,
    Present,
    RegexMatch,
    RegistryLocator,
    ResolvedValue,
    Rule,
)

__all__ = [
    "Absent",
    "AccessDenied",
    "CheckDefinition",
    "CheckResult",
    "CheckStatus",
    "Expectation",
    "LiteralEquals",
    "MustBeAbsent",
    "NumericEquals",
    "Present",
    "RegexMatch",
    "RegistryLocator",
    "ResolvedValue",
    "Rule",
]
