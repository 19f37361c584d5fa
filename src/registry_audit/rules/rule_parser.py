"""Parser for ``r:<path> -> <name> -> <expected>`` rule strings."""

from __future__ import annotations

import re
from typing import Sequence

from ..models import RegistryLocator, Rule

_RULE_PATTERN = re.compile(r"^r:(?P<path>.+?) -> (?P<name>.+?) -> (?P<expected>.+)$", re.DOTALL)
_LOCAL_MACHINE_PREFIX = "HKEY_LOCAL_MACHINE\\"
_LOCAL_MACHINE_DRIVE = "HKLM:\\"


class RuleParseError(ValueError):
    """Raised when a check does not carry a usable rule string."""


class NoRulesError(RuleParseError):
    """Raised when a check definition lists no rule strings."""


class MalformedRuleError(RuleParseError):
    """Raised when a rule string does not follow the three-segment grammar."""


def normalize_path(path: str) -> str:
    """Map ``HKEY_LOCAL_MACHINE\\`` onto the ``HKLM:\\`` drive form.

    Any other prefix is returned unchanged.
    """

    if path[: len(_LOCAL_MACHINE_PREFIX)].upper() == _LOCAL_MACHINE_PREFIX:
        return _LOCAL_MACHINE_DRIVE + path[len(_LOCAL_MACHINE_PREFIX) :]
    return path


def parse_rule(raw: str) -> Rule:
    """Return the :class:`Rule` encoded by ``raw``.

    The expected segment is kept verbatim; classifying it is left to the
    comparator.
    """

    match = _RULE_PATTERN.match(raw.strip()) if isinstance(raw, str) else None
    if match is None:
        raise MalformedRuleError(f"Rule does not match 'r:<path> -> <name> -> <expected>': {raw!r}")

    path = match.group("path").strip()
    name = match.group("name").strip()
    expected = match.group("expected").strip()
    if not path or not name or not expected:
        raise MalformedRuleError(f"Rule has an empty segment: {raw!r}")

    return Rule(locator=RegistryLocator(path=normalize_path(path), name=name), expected=expected)


def parse_check_rules(rules: Sequence[str]) -> Rule:
    """Parse the rule list of a check.

    Only the first rule string is evaluated; additional entries are ignored.
    """

    if not rules:
        raise NoRulesError("Check defines no rules")
    return parse_rule(rules[0])


__all__ = [
    "MalformedRuleError",
    "NoRulesError",
    "RuleParseError",
    "normalize_path",
    "parse_check_rules",
    "parse_rule",
]
