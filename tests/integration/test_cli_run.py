"""Integration tests for the ``registry-audit run`` command."""

from __future__ import annotations

import io
import json
from contextlib import redirect_stdout
from pathlib import Path

import pytest

from registry_audit.adapters import (
    BackendUnavailableError,
    InMemoryRegistry,
    PowerShellRegistryBackend,
    SnapshotError,
)
from registry_audit.cli import app

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"
CHECKS = FIXTURES / "checks.yaml"
SNAPSHOT = FIXTURES / "snapshot.yaml"


def invoke_cli(args: list[str]) -> tuple[int, str]:
    """Execute the CLI with the provided arguments and capture stdout."""

    stdout = io.StringIO()
    with redirect_stdout(stdout):
        exit_code = app.main(args)
    return exit_code, stdout.getvalue()


def test_run_with_snapshot_outputs_table() -> None:
    exit_code, output = invoke_cli(["run", str(CHECKS), "--snapshot", str(SNAPSHOT)])

    assert exit_code == 1
    assert "Total: 7  Passed: 3  Failed: 1  Errors: 3" in output
    assert "Invalid rule format" in output
    assert "Registry value not found" in output


def test_run_outputs_json_results_in_order() -> None:
    exit_code, output = invoke_cli(
        ["run", str(CHECKS), "--backend", "snapshot", "--snapshot", str(SNAPSHOT), "--format", "json"]
    )

    assert exit_code == 1
    payload = json.loads(output)
    results = {result["id"]: result for result in payload["results"]}

    assert [result["id"] for result in payload["results"]] == [
        "1001",
        "1002",
        "1003",
        "1004",
        "1005",
        "1006",
        "1007",
    ]
    assert results["1001"]["status"] == "PASS"
    assert results["1001"]["actual_value"] == "1"
    assert results["1001"]["compliance"] == "cis: 18.9.85.1.1; cis_csc: 2, 7"

    assert results["1002"]["status"] == "FAIL"
    assert results["1002"]["actual_value"] == "8"
    assert results["1002"]["error"] is None

    assert results["1003"]["status"] == "PASS"
    assert results["1003"]["error"] is None

    assert results["1004"]["error"].startswith("Registry access error: ")
    assert results["1005"]["error"] == "Invalid rule format"
    assert results["1006"]["error"] == "Registry value not found"
    assert results["1006"]["expected_value"] == "n:5"

    assert results["1007"]["status"] == "PASS"
    assert results["1007"]["actual_value"] == "Windows 10 Enterprise"

    assert payload["summary"] == {"total": 7, "passed": 3, "failed": 1, "errors": 3}
    assert payload["metadata"]["check_count"] == 7


@pytest.mark.parametrize(("fail_on", "expected_code"), [("none", 0), ("error", 1), ("fail", 1)])
def test_fail_on_threshold(fail_on: str, expected_code: int) -> None:
    exit_code, _ = invoke_cli(
        ["run", str(CHECKS), "--snapshot", str(SNAPSHOT), "--fail-on", fail_on]
    )

    assert exit_code == expected_code


def test_fail_on_error_ignores_plain_failures(tmp_path: Path) -> None:
    checks = tmp_path / "checks.yaml"
    checks.write_text(
        "checks:\n"
        "  - id: only\n"
        "    title: Wrong value\n"
        "    rules: ['r:HKEY_LOCAL_MACHINE\\SYSTEM\\CurrentControlSet\\Services\\Netlogon"
        "\\Parameters -> MinimumPasswordLength -> n:14']\n",
        encoding="utf-8",
    )

    assert invoke_cli(["run", str(checks), "--snapshot", str(SNAPSHOT), "--fail-on", "error"])[0] == 0
    assert invoke_cli(["run", str(checks), "--snapshot", str(SNAPSHOT)])[0] == 1


def test_run_writes_report_to_output(tmp_path: Path) -> None:
    destination = tmp_path / "reports" / "audit.csv"

    exit_code, output = invoke_cli(
        [
            "run",
            str(CHECKS),
            "--snapshot",
            str(SNAPSHOT),
            "--format",
            "csv",
            "--output",
            str(destination),
            "--fail-on",
            "none",
        ]
    )

    assert exit_code == 0
    assert f"Report written to {destination}" in output
    content = destination.read_text(encoding="utf-8")
    assert content.startswith("ID,Title,Description,Status")
    assert len(content.strip().splitlines()) == 8


def test_missing_check_file_exits_with_error(tmp_path: Path) -> None:
    exit_code, output = invoke_cli(["run", str(tmp_path / "missing.yaml"), "--snapshot", str(SNAPSHOT)])

    assert exit_code == 2
    assert output.startswith("Error: Check file not found")


def test_snapshot_backend_requires_snapshot() -> None:
    exit_code, output = invoke_cli(["run", str(CHECKS), "--backend", "snapshot"])

    assert exit_code == 2
    assert "requires --snapshot" in output


def test_auto_backend_without_registry(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app.sys, "platform", "linux")

    exit_code, output = invoke_cli(["run", str(CHECKS)])

    assert exit_code == 2
    assert "pass --snapshot" in output


def test_create_backend_variants() -> None:
    powershell = app.create_backend("powershell", powershell_bin="pwsh", timeout=3)
    assert isinstance(powershell, PowerShellRegistryBackend)
    assert powershell.powershell_bin == "pwsh"
    assert powershell.timeout == 3

    assert isinstance(app.create_backend("auto", snapshot_path=SNAPSHOT), InMemoryRegistry)

    with pytest.raises(SnapshotError):
        app.create_backend("snapshot")
    with pytest.raises(BackendUnavailableError):
        app.create_backend("registry-over-http")


def test_no_command_prints_help() -> None:
    exit_code, output = invoke_cli([])

    assert exit_code == 0
    assert "registry-audit" in output


def test_unknown_backend_from_environment_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(app.BACKEND_ENV_VAR, "bogus")

    exit_code, output = invoke_cli(["run", str(CHECKS)])

    assert exit_code == 2
    assert output.startswith("Error: Unknown registry backend: bogus")


def test_backend_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(app.BACKEND_ENV_VAR, "snapshot")

    exit_code, output = invoke_cli(
        ["run", str(CHECKS), "--snapshot", str(SNAPSHOT), "--format", "json", "--fail-on", "none"]
    )

    assert exit_code == 0
    assert json.loads(output)["metadata"]["backend"] == "snapshot"
