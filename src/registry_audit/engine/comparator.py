"""Comparison policies applied to resolved registry values."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ..models import (
    Absent,
    CheckStatus,
    Expectation,
    LiteralEquals,
    MustBeAbsent,
    NumericEquals,
    Present,
    RegexMatch,
    ResolvedValue,
)
from ..models.check import NOT_AVAILABLE

_NUMERIC = re.compile(r"^n:(\d+)$")
_REGEX = re.compile(r"^r:(.+)$", re.DOTALL)
_NOT_REGEX = re.compile(r"^not r:(.*)$", re.DOTALL)
_INTEGER = re.compile(r"-?[0-9]+")


@dataclass(frozen=True, slots=True)
class Comparison:
    status: CheckStatus
    actual_value: str
    expected_value: str


def classify_expectation(expected_raw: str) -> Expectation:
    """Classify the expected segment of a rule; the first matching form wins."""

    numeric = _NUMERIC.match(expected_raw)
    if numeric is not None:
        return NumericEquals(value=int(numeric.group(1)))

    regex = _REGEX.match(expected_raw)
    if regex is not None:
        return RegexMatch(pattern=regex.group(1))

    negated = _NOT_REGEX.match(expected_raw)
    if negated is not None:
        return MustBeAbsent(pattern=negated.group(1))

    return LiteralEquals(text=expected_raw)


def compare(resolved: ResolvedValue, expected_raw: str) -> Comparison:
    """Judge ``resolved`` against the raw expected text.

    ``re.error`` propagates for an invalid regular expression.
    """

    expectation = classify_expectation(expected_raw)
    passed = _satisfies(resolved, expectation)
    actual = resolved.value if isinstance(resolved, Present) else NOT_AVAILABLE

    return Comparison(
        status=CheckStatus.PASS if passed else CheckStatus.FAIL,
        actual_value=actual,
        expected_value=expected_raw,
    )


def _satisfies(resolved: ResolvedValue, expectation: Expectation) -> bool:
    if isinstance(expectation, MustBeAbsent):
        # Only absence is checked; the pattern after "not r:" is not matched.
        return isinstance(resolved, Absent)

    if not isinstance(resolved, Present):
        return False

    if isinstance(expectation, NumericEquals):
        digits = _INTEGER.fullmatch(resolved.value.strip())
        if digits is None:
            return False
        return int(digits.group(0)) == expectation.value

    if isinstance(expectation, RegexMatch):
        return re.search(expectation.pattern, resolved.value) is not None

    return resolved.value == expectation.text


__all__ = ["Comparison", "classify_expectation", "compare"]
