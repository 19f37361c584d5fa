"""Command-line interface implementation for registry audits."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from ..adapters import (
    BackendUnavailableError,
    PowerShellRegistryBackend,
    RegistryBackend,
    SnapshotError,
    WinRegBackend,
    load_snapshot,
)
from ..rules import CheckLoader, CheckLoadError
from ..service import AuditRun, AuditService
from .reporting import RENDERERS, render

BACKENDS = ("auto", "winreg", "powershell", "snapshot")
FAIL_ON_CHOICES = ("none", "error", "fail")
BACKEND_ENV_VAR = "REGISTRY_AUDIT_BACKEND"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""

    parser = argparse.ArgumentParser(
        prog="registry-audit", description="Registry security configuration audit CLI"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity for diagnostics written to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser(
        "run", help="Evaluate check files against the registry and report results."
    )
    run_parser.add_argument(
        "checks",
        type=Path,
        nargs="+",
        help="YAML or JSON files containing a top-level 'checks' list.",
    )
    run_parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=os.environ.get(BACKEND_ENV_VAR, "auto"),
        help=(
            "Registry backend. 'auto' uses winreg on Windows and the snapshot "
            f"backend elsewhere. Defaults to ${BACKEND_ENV_VAR} or 'auto'."
        ),
    )
    run_parser.add_argument(
        "--snapshot",
        type=Path,
        default=None,
        help="YAML/JSON registry snapshot used by the snapshot backend.",
    )
    run_parser.add_argument(
        "--powershell-bin",
        default="powershell",
        help="Name or path of the PowerShell executable used by the powershell backend.",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Per-value timeout in seconds for the powershell backend.",
    )
    run_parser.add_argument(
        "--format",
        choices=list(RENDERERS),
        default="table",
        help="Output format for audit results.",
    )
    run_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the report to this file instead of stdout.",
    )
    run_parser.add_argument(
        "--fail-on",
        choices=FAIL_ON_CHOICES,
        default="fail",
        help=(
            "Exit with status 1 when any check fails or errors ('fail'), only "
            "when a check errors ('error'), or never ('none')."
        ),
    )

    return parser


def create_backend(
    backend_name: str,
    *,
    snapshot_path: Path | None = None,
    powershell_bin: str = "powershell",
    timeout: float | None = 30.0,
) -> RegistryBackend:
    """Instantiate the registry backend selected on the command line."""

    if backend_name == "auto":
        if snapshot_path is not None:
            backend_name = "snapshot"
        elif sys.platform == "win32":
            backend_name = "winreg"
        else:
            raise BackendUnavailableError(
                "No registry available on this platform; pass --snapshot or choose a backend"
            )

    if backend_name == "winreg":
        return WinRegBackend()
    if backend_name == "powershell":
        return PowerShellRegistryBackend(powershell_bin=powershell_bin, timeout=timeout)
    if backend_name == "snapshot":
        if snapshot_path is None:
            raise SnapshotError("The snapshot backend requires --snapshot")
        return load_snapshot(snapshot_path)

    raise BackendUnavailableError(f"Unknown registry backend: {backend_name}")


def create_service(
    backend_name: str = "auto",
    *,
    snapshot_path: Path | None = None,
    powershell_bin: str = "powershell",
    timeout: float | None = 30.0,
) -> AuditService:
    """Create an audit service bound to the selected registry backend."""

    backend = create_backend(
        backend_name,
        snapshot_path=snapshot_path,
        powershell_bin=powershell_bin,
        timeout=timeout,
    )
    logger.info("Using %s registry backend", type(backend).__name__)
    return AuditService(backend=backend)


def _should_fail(run: AuditRun, fail_on: str) -> bool:
    summary = run.summary()
    if fail_on == "error":
        return summary["errors"] > 0
    if fail_on == "fail":
        return summary["failed"] + summary["errors"] > 0
    return False


def _handle_run(args: argparse.Namespace) -> int:
    try:
        checks = CheckLoader().load_many(args.checks)
        service = create_service(
            args.backend,
            snapshot_path=args.snapshot,
            powershell_bin=args.powershell_bin,
            timeout=args.timeout,
        )
    except (CheckLoadError, SnapshotError, BackendUnavailableError) as exc:
        print(f"Error: {exc}")
        return 2

    metadata = {
        "check_files": ", ".join(str(path) for path in args.checks),
        "backend": args.backend,
    }
    run = service.audit(checks, metadata=metadata)
    output = render(run, args.format)

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output, encoding="utf-8")
        print(f"Report written to {args.output}")
    else:
        print(output)

    return 1 if _should_fail(run, args.fail_on) else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point used by tests and the ``python -m`` invocation."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format=LOG_FORMAT, stream=sys.stderr)

    if args.command == "run":
        return _handle_run(args)

    parser.print_help()
    return 0


def run() -> None:  # pragma: no cover - thin wrapper for module execution
    """Execute the CLI and exit with the produced status code."""

    raise SystemExit(main())


if __name__ == "__main__":  # pragma: no cover - module execution guard
    run()
