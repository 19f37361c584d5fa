"""Orchestration layer used by the CLI to run registry audits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .adapters import RegistryBackend, ValueResolver
from .engine import CheckEvaluator
from .models import CheckDefinition, CheckResult, CheckStatus

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuditRun:
    """Results returned by :meth:`AuditService.audit` plus run metadata."""

    results: list[CheckResult]
    metadata: Mapping[str, Any]

    def summary(self) -> dict[str, int]:
        """Count results; an errored check counts as an error, not a failure."""

        passed = sum(1 for result in self.results if result.status is CheckStatus.PASS)
        errors = sum(1 for result in self.results if result.has_error)
        return {
            "total": len(self.results),
            "passed": passed,
            "failed": len(self.results) - passed - errors,
            "errors": errors,
        }


class AuditService:
    """High level service that evaluates ordered check definitions."""

    def __init__(
        self,
        *,
        evaluator: CheckEvaluator | None = None,
        resolver: ValueResolver | None = None,
        backend: RegistryBackend | None = None,
    ) -> None:
        if evaluator is None:
            if resolver is None:
                if backend is None:
                    raise ValueError("AuditService requires an evaluator, resolver or backend")
                resolver = ValueResolver(backend)
            evaluator = CheckEvaluator(resolver)
        self._evaluator = evaluator

    # ------------------------------------------------------------------
    def run_all(self, checks: Iterable[CheckDefinition]) -> list[CheckResult]:
        """Evaluate every check in order, one result per check."""

        return [self._evaluator.evaluate(check) for check in checks]

    # ------------------------------------------------------------------
    def audit(
        self,
        checks: Iterable[CheckDefinition],
        *,
        metadata: Mapping[str, Any] | None = None,
    ) -> AuditRun:
        """Run :meth:`run_all` and attach metadata describing the run."""

        results = self.run_all(checks)
        run_metadata: dict[str, Any] = dict(metadata or {})
        run_metadata["check_count"] = len(results)

        run = AuditRun(results=results, metadata=run_metadata)
        logger.info("Audit finished: %s", run.summary())
        return run


__all__ = ["AuditRun", "AuditService"]
