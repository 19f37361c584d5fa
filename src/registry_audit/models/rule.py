"""Parsed rule models and the values a registry lookup can resolve to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class RegistryLocator:
    """Key path plus value name identifying a single registry value."""

    path: str
    name: str

    def __str__(self) -> str:
        return f"{self.path} -> {self.name}"


@dataclass(frozen=True, slots=True)
class Rule:
    """A parsed rule string: where to read and the raw expected text."""

    locator: RegistryLocator
    expected: str


# Expectations -------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class NumericEquals:
    value: int


@dataclass(frozen=True, slots=True)
class RegexMatch:
    pattern: str


@dataclass(frozen=True, slots=True)
class MustBeAbsent:
    """Negated existence. ``pattern`` is kept for display and never matched."""

    pattern: str


@dataclass(frozen=True, slots=True)
class LiteralEquals:
    text: str


Expectation = Union[NumericEquals, RegexMatch, MustBeAbsent, LiteralEquals]


# Resolved values ----------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Present:
    value: str


@dataclass(frozen=True, slots=True)
class Absent:
    pass


@dataclass(frozen=True, slots=True)
class AccessDenied:
    detail: str


ResolvedValue = Union[Present, Absent, AccessDenied]
