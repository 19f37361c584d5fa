"""Renderers turning audit runs into table, JSON, CSV and HTML reports."""

from __future__ import annotations

import csv
import html
import io
import json
from typing import Any, Callable, Mapping

from ..models import CheckResult
from ..service import AuditRun

CSV_HEADERS = (
    "ID",
    "Title",
    "Description",
    "Status",
    "Actual Value",
    "Expected Value",
    "Error",
    "Compliance",
    "Remediation",
)


def serialize_result(result: CheckResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "title": result.title,
        "description": result.description,
        "compliance": result.compliance,
        "remediation": result.remediation,
        "status": result.status.value,
        "actual_value": result.actual_value,
        "expected_value": result.expected_value,
        "error": result.error,
    }


def report_to_dict(run: AuditRun) -> dict[str, Any]:
    return {
        "metadata": dict(run.metadata),
        "summary": run.summary(),
        "results": [serialize_result(result) for result in run.results],
    }


def render_json(run: AuditRun) -> str:
    return json.dumps(report_to_dict(run), indent=2)


def render_table(run: AuditRun) -> str:
    """Render results as a simple text table for terminal output."""

    if not run.results:
        return "No checks evaluated."

    headers = ("Status", "ID", "Title", "Actual", "Expected", "Error")
    rows = [headers]
    for result in run.results:
        rows.append(
            (
                result.status.value,
                result.id,
                result.title,
                result.actual_value,
                result.expected_value,
                result.error or "-",
            )
        )

    widths = [max(len(str(row[idx])) for row in rows) for idx in range(len(headers))]

    def format_row(values: tuple[str, ...]) -> str:
        return "  ".join(value.ljust(width) for value, width in zip(values, widths, strict=True))

    lines = [format_row(headers)]
    lines.append("  ".join("=" * width for width in widths))
    for row in rows[1:]:
        lines.append(format_row(row).rstrip())

    summary = run.summary()
    lines.append("")
    lines.append(
        f"Total: {summary['total']}  Passed: {summary['passed']}  "
        f"Failed: {summary['failed']}  Errors: {summary['errors']}"
    )
    return "\n".join(lines)


def render_csv(run: AuditRun) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for result in run.results:
        writer.writerow(
            (
                result.id,
                result.title,
                result.description,
                result.status.value,
                result.actual_value,
                result.expected_value,
                result.error or "",
                result.compliance or "",
                result.remediation or "",
            )
        )
    return buffer.getvalue()


def render_html(run: AuditRun) -> str:
    """Render an unstyled HTML document with a summary and one row per check."""

    summary = run.summary()
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head><meta charset=\"utf-8\"><title>Registry Audit Report</title></head>",
        "<body>",
        "<h1>Registry Audit Report</h1>",
        "<ul>",
    ]
    for key in ("total", "passed", "failed", "errors"):
        lines.append(f"<li>{key.title()}: {summary[key]}</li>")
    lines.append("</ul>")

    if run.metadata:
        lines.append("<dl>")
        for key in sorted(run.metadata):
            lines.append(f"<dt>{_escape(key)}</dt><dd>{_escape(run.metadata[key])}</dd>")
        lines.append("</dl>")

    lines.append("<table>")
    lines.append("<tr>" + "".join(f"<th>{_escape(header)}</th>" for header in CSV_HEADERS) + "</tr>")
    for result in run.results:
        cells = (
            result.id,
            result.title,
            result.description,
            result.status.value,
            result.actual_value,
            result.expected_value,
            result.error or "",
            result.compliance or "",
            result.remediation or "",
        )
        row_class = "error" if result.has_error else result.status.value.lower()
        lines.append(
            f"<tr class=\"{row_class}\">"
            + "".join(f"<td>{_escape(cell)}</td>" for cell in cells)
            + "</tr>"
        )
    lines.extend(["</table>", "</body>", "</html>", ""])
    return "\n".join(lines)


def _escape(value: object) -> str:
    return html.escape(str(value))


RENDERERS: Mapping[str, Callable[[AuditRun], str]] = {
    "table": render_table,
    "json": render_json,
    "csv": render_csv,
    "html": render_html,
}


def render(run: AuditRun, output_format: str) -> str:
    try:
        renderer = RENDERERS[output_format]
    except KeyError:
        raise ValueError(f"format must be one of: {', '.join(RENDERERS)}") from None
    return renderer(run)


__all__ = [
    "CSV_HEADERS",
    "RENDERERS",
    "render",
    "render_csv",
    "render_html",
    "render_json",
    "render_table",
    "report_to_dict",
    "serialize_result",
]
