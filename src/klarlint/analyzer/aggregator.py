"""Aggregator — merges per-file results into one deterministic report.

This is the only place where ordering is established, so the report does
not depend on rule execution order or on the order files finished in.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from klarlint.analyzer.models import (
    AnalysisReport,
    FileResult,
    Finding,
    ReportStatus,
    Severity,
)

_FAILING = frozenset({Severity.CRITICAL, Severity.HIGH})
_WARNING = frozenset({Severity.MEDIUM, Severity.LOW})


def aggregate(file_results: Iterable[FileResult]) -> AnalysisReport:
    """Build an AnalysisReport from per-file results."""
    files = tuple(sorted(file_results, key=lambda r: r.path))
    findings = tuple(
        sorted((f for r in files for f in r.findings), key=Finding.sort_key)
    )

    severity_counts = {s: 0 for s in Severity}
    severity_counts.update(Counter(f.severity for f in findings))
    rule_counts = dict(sorted(Counter(f.rule for f in findings).items()))

    public = sum(r.public_declarations for r in files)
    documented = sum(r.documented_declarations for r in files)

    return AnalysisReport(
        findings=findings,
        files=files,
        severity_counts=severity_counts,
        rule_counts=rule_counts,
        doc_coverage_ratio=coverage_ratio(documented, public),
        status=overall_status(findings),
    )


def coverage_ratio(documented: int, public: int) -> float:
    """Documented / public declarations; 1.0 when there are none."""
    if public == 0:
        return 1.0
    return documented / public


def overall_status(findings: Iterable[Finding]) -> ReportStatus:
    severities = {f.severity for f in findings}
    if severities & _FAILING:
        return ReportStatus.FAIL
    if severities & _WARNING:
        return ReportStatus.PASS_WITH_WARNINGS
    return ReportStatus.PASS
