"""Evaluate a single check definition into a :class:`CheckResult`."""

from __future__ import annotations

import logging
from dataclasses import replace

from ..adapters import ValueResolver
from ..models import Absent, AccessDenied, CheckDefinition, CheckResult, MustBeAbsent
from ..rules import NoRulesError, RuleParseError, parse_check_rules
from .comparator import classify_expectation, compare

logger = logging.getLogger(__name__)

INVALID_RULE_FORMAT = "Invalid rule format"
VALUE_NOT_FOUND = "Registry value not found"
ACCESS_ERROR = "Registry access error: {detail}"
PROCESSING_ERROR = "Check processing error: {detail}"


class CheckEvaluator:
    """Parse, resolve and compare one check, capturing every failure in the result."""

    def __init__(self, resolver: ValueResolver) -> None:
        self.resolver = resolver

    # ------------------------------------------------------------------
    def evaluate(self, check: CheckDefinition) -> CheckResult:
        """Return exactly one result for ``check``; never raises."""

        base = CheckResult(
            id=check.id,
            title=check.title,
            description=check.description,
            compliance=check.compliance,
            remediation=check.remediation,
        )

        try:
            result = self._evaluate(check, base)
        except Exception as exc:  # noqa: BLE001 - failures are reported per check
            logger.warning("Check %s failed to process", check.id, exc_info=True)
            return replace(base, error=PROCESSING_ERROR.format(detail=exc))

        if result.has_error:
            logger.warning("Check %s: %s", check.id, result.error)
        else:
            logger.debug("Check %s: %s", check.id, result.status.value)
        return result

    # ------------------------------------------------------------------
    def _evaluate(self, check: CheckDefinition, base: CheckResult) -> CheckResult:
        try:
            rule = parse_check_rules(check.rules)
        except NoRulesError:
            logger.info("Check %s defines no rules", check.id)
            return replace(base, error=INVALID_RULE_FORMAT)
        except RuleParseError as exc:
            logger.info("Check %s: %s", check.id, exc)
            return replace(base, error=INVALID_RULE_FORMAT)

        resolved = self.resolver.resolve(rule.locator)

        if isinstance(resolved, AccessDenied):
            return replace(
                base,
                expected_value=rule.expected,
                error=ACCESS_ERROR.format(detail=resolved.detail),
            )

        if isinstance(resolved, Absent) and not isinstance(
            classify_expectation(rule.expected), MustBeAbsent
        ):
            return replace(base, expected_value=rule.expected, error=VALUE_NOT_FOUND)

        comparison = compare(resolved, rule.expected)
        return replace(
            base,
            status=comparison.status,
            actual_value=comparison.actual_value,
            expected_value=comparison.expected_value,
        )


__all__ = [
    "ACCESS_ERROR",
    "CheckEvaluator",
    "INVALID_RULE_FORMAT",
    "PROCESSING_ERROR",
    "VALUE_NOT_FOUND",
]
