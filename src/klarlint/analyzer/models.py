"""Analyzer data models — findings, per-file results, and the run report."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class Severity(enum.Enum):
    """Finding severity level, ordered from most to least severe."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    SUGGESTION = "suggestion"

    @property
    def rank(self) -> int:
        """Higher rank means more severe."""
        return _SEVERITY_RANK[self]

    def at_least(self, other: Severity) -> bool:
        return self.rank >= other.rank


_SEVERITY_RANK = {
    Severity.CRITICAL: 4,
    Severity.HIGH: 3,
    Severity.MEDIUM: 2,
    Severity.LOW: 1,
    Severity.SUGGESTION: 0,
}

# Engine-level pseudo rules, reported alongside regular rule findings
PARSE_ERROR = "parse-error"
IO_ERROR = "io-error"


@dataclass(frozen=True)
class Finding:
    """A single reported issue."""

    rule: str
    severity: Severity
    file: str
    line: int
    column: int
    message: str
    suggested_fix: str | None = None

    def sort_key(self) -> tuple[str, int, int, str, str]:
        return (self.file, self.line, self.column, self.rule, self.message)


class FileStatus(enum.Enum):
    """How completely a file was analyzed."""

    ANALYZED = "analyzed"
    PARTIAL = "partial"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class FileResult:
    """Outcome of analyzing one file."""

    path: str
    findings: tuple[Finding, ...] = ()
    status: FileStatus = FileStatus.ANALYZED
    detail: str = ""
    public_declarations: int = 0
    documented_declarations: int = 0


class ReportStatus(enum.Enum):
    """Overall verdict of a run."""

    PASS = "pass"
    PASS_WITH_WARNINGS = "pass-with-warnings"
    FAIL = "fail"


@dataclass(frozen=True)
class AnalysisReport:
    """Aggregate result of an analysis run."""

    findings: tuple[Finding, ...] = ()
    files: tuple[FileResult, ...] = ()
    severity_counts: dict[Severity, int] = field(default_factory=dict)
    rule_counts: dict[str, int] = field(default_factory=dict)
    doc_coverage_ratio: float = 1.0
    status: ReportStatus = ReportStatus.PASS

    def count(self, severity: Severity) -> int:
        return self.severity_counts.get(severity, 0)

    def findings_at_least(self, threshold: Severity) -> list[Finding]:
        """Findings whose severity is at or above ``threshold``."""
        return [f for f in self.findings if f.severity.at_least(threshold)]
