"""Report renderers — structured (JSON) and human-readable (rich) forms."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from klarlint.analyzer.models import (
    AnalysisReport,
    FileResult,
    FileStatus,
    Finding,
    ReportStatus,
    Severity,
)

SEVERITY_COLORS = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.SUGGESTION: "dim",
}

_STATUS_COLORS = {
    ReportStatus.PASS: "green",
    ReportStatus.PASS_WITH_WARNINGS: "yellow",
    ReportStatus.FAIL: "red",
}


def finding_to_dict(finding: Finding) -> dict[str, Any]:
    data: dict[str, Any] = {
        "rule": finding.rule,
        "severity": finding.severity.value,
        "file": finding.file,
        "line": finding.line,
        "column": finding.column,
        "message": finding.message,
    }
    if finding.suggested_fix is not None:
        data["suggested_fix"] = finding.suggested_fix
    return data


def to_dict(report: AnalysisReport) -> dict[str, Any]:
    """The structured report with stable field names."""
    summary: dict[str, Any] = {s.value: report.count(s) for s in Severity}
    summary["doc_coverage_ratio"] = report.doc_coverage_ratio
    summary["status"] = report.status.value
    return {
        "findings": [finding_to_dict(f) for f in report.findings],
        "summary": summary,
        "rules": dict(report.rule_counts),
        "files": [
            {"path": r.path, "status": r.status.value, "detail": r.detail}
            for r in report.files
        ],
    }


def render_json(report: AnalysisReport) -> str:
    return json.dumps(to_dict(report), indent=2) + "\n"


def describe_file_status(result: FileResult) -> str:
    if result.status == FileStatus.ANALYZED:
        return "fully analyzed"
    if result.status == FileStatus.PARTIAL:
        return f"partially analyzed ({result.detail})"
    return f"skipped: {result.detail}"


def render_text(report: AnalysisReport, console: Console) -> None:
    """Print the report grouped by file."""
    by_file: dict[str, list[Finding]] = {}
    for f in report.findings:
        by_file.setdefault(f.file, []).append(f)

    for result in report.files:
        findings = by_file.get(result.path, [])
        console.print(
            f"[bold cyan]{escape(result.path)}[/bold cyan] "
            f"[dim]{escape(describe_file_status(result))}, "
            f"{len(findings)} finding(s)[/dim]"
        )
        if not findings:
            continue

        table = Table(show_header=True, show_lines=False, box=None, pad_edge=False)
        table.add_column("Location", justify="right", no_wrap=True)
        table.add_column("Severity", no_wrap=True)
        table.add_column("Rule", style="magenta", no_wrap=True)
        table.add_column("Message")
        for f in findings:
            color = SEVERITY_COLORS[f.severity]
            message = escape(f.message)
            if f.suggested_fix is not None:
                message += f"\n[dim]fix: {escape(f.suggested_fix)}[/dim]"
            table.add_row(
                f"{f.line}:{f.column}",
                f"[{color}]{f.severity.value}[/{color}]",
                f.rule,
                message,
            )
        console.print(table)
        console.print()

    _print_summary(report, console)


def _print_summary(report: AnalysisReport, console: Console) -> None:
    counts = ", ".join(f"{report.count(s)} {s.value}" for s in Severity)
    color = _STATUS_COLORS[report.status]
    console.print(f"Analyzed {len(report.files)} file(s): {counts}")
    console.print(f"Documentation coverage: {report.doc_coverage_ratio:.1%}")
    console.print(f"Status: [{color}]{report.status.value}[/{color}]")
