from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from registry_audit.adapters import InMemoryRegistry, ValueResolver
from registry_audit.models import CheckDefinition, CheckResult, CheckStatus
from registry_audit.service import AuditRun, AuditService


@dataclass
class DummyEvaluator:
    seen: list[str] = field(default_factory=list)

    def evaluate(self, check: CheckDefinition) -> CheckResult:
        self.seen.append(check.id)
        if check.id == "boom":
            return CheckResult(id=check.id, title=check.title, error="Check processing error: x")
        return CheckResult(id=check.id, title=check.title, status=CheckStatus.PASS)


def make_checks() -> list[CheckDefinition]:
    return [
        CheckDefinition(
            id="1",
            title="Enabled",
            rules=(r"r:HKEY_LOCAL_MACHINE\Software\X -> Enabled -> n:1",),
        ),
        CheckDefinition(id="2", title="No rules"),
        CheckDefinition(
            id="3",
            title="Wrong value",
            rules=(r"r:HKEY_LOCAL_MACHINE\Software\X -> Level -> n:5",),
        ),
        CheckDefinition(id="4", title="Malformed", rules=("totally not a rule",)),
        CheckDefinition(
            id="5",
            title="Absent",
            rules=(r"r:HKEY_LOCAL_MACHINE\Software\X -> Legacy -> not r:.+",),
        ),
    ]


def make_service() -> AuditService:
    registry = InMemoryRegistry({"HKLM:\\Software\\X": {"Enabled": 1, "Level": 3}})
    return AuditService(backend=registry)


def test_run_all_preserves_length_and_order() -> None:
    checks = make_checks()

    results = make_service().run_all(checks)

    assert [result.id for result in results] == [check.id for check in checks]
    assert [result.status for result in results] == [
        CheckStatus.PASS,
        CheckStatus.FAIL,
        CheckStatus.FAIL,
        CheckStatus.FAIL,
        CheckStatus.PASS,
    ]
    assert [result.error for result in results] == [
        None,
        "Invalid rule format",
        None,
        "Invalid rule format",
        None,
    ]


def test_run_all_is_idempotent() -> None:
    service = make_service()
    checks = make_checks()

    assert service.run_all(checks) == service.run_all(checks)


def test_run_all_uses_injected_evaluator() -> None:
    evaluator = DummyEvaluator()
    service = AuditService(evaluator=evaluator)
    checks = [CheckDefinition(id=str(i), title="t") for i in range(3)]

    results = service.run_all(checks)

    assert evaluator.seen == ["0", "1", "2"]
    assert len(results) == 3


def test_audit_summarizes_results() -> None:
    evaluator = DummyEvaluator()
    service = AuditService(evaluator=evaluator)
    checks = [
        CheckDefinition(id="ok", title="t"),
        CheckDefinition(id="boom", title="t"),
        CheckDefinition(id="ok2", title="t"),
    ]

    run = service.audit(checks, metadata={"host": "ws-01"})

    assert isinstance(run, AuditRun)
    assert run.metadata == {"host": "ws-01", "check_count": 3}
    assert run.summary() == {"total": 3, "passed": 2, "failed": 0, "errors": 1}


def test_summary_separates_failures_from_errors() -> None:
    run = AuditService(backend=InMemoryRegistry({"HKLM:\\Software\\X": {"Level": 3}})).audit(
        make_checks()
    )

    assert run.summary() == {"total": 5, "passed": 1, "failed": 1, "errors": 3}


def test_service_accepts_resolver() -> None:
    resolver = ValueResolver(InMemoryRegistry({"HKLM:\\Software\\X": {"Enabled": 1}}))

    results = AuditService(resolver=resolver).run_all(make_checks()[:1])

    assert results[0].status is CheckStatus.PASS


def test_service_requires_a_collaborator() -> None:
    with pytest.raises(ValueError):
        AuditService()
