"""Tests for the JSON and text renderers."""

from __future__ import annotations

import json
from io import StringIO

from rich.console import Console

from klarlint.analyzer.aggregator import aggregate
from klarlint.analyzer.engine import analyze_source
from klarlint.analyzer.models import AnalysisReport, FileResult, FileStatus
from klarlint.analyzer.report import describe_file_status, render_json, render_text
from klarlint.analyzer.rules import BUILTIN_RULES


def report_for(text: str, path: str = "src/lib.kl") -> AnalysisReport:
    return aggregate([analyze_source(path, text, BUILTIN_RULES)])


def render(report: AnalysisReport) -> str:
    buf = StringIO()
    render_text(report, Console(file=buf, width=200))
    return buf.getvalue()


class TestJson:
    def test_structure(self, dirty_source):
        data = json.loads(render_json(report_for(dirty_source)))
        assert set(data) == {"findings", "summary", "rules", "files"}
        assert data["summary"] == {
            "critical": 1,
            "high": 0,
            "medium": 1,
            "low": 0,
            "suggestion": 0,
            "doc_coverage_ratio": 1.0,
            "status": "fail",
        }
        assert data["rules"] == {"naming.case": 1, "ownership.stored-reference": 1}
        assert data["files"] == [{"path": "src/lib.kl", "status": "analyzed", "detail": ""}]

    def test_finding_fields(self, dirty_source):
        data = json.loads(render_json(report_for(dirty_source)))
        first = data["findings"][0]
        assert first == {
            "rule": "ownership.stored-reference",
            "severity": "critical",
            "file": "src/lib.kl",
            "line": 2,
            "column": 5,
            "message": first["message"],
            "suggested_fix": "input: string",
        }

    def test_missing_fix_is_omitted(self):
        data = json.loads(render_json(report_for("trait Big {\n    fn load_a(&self);\n    fn send_b(&self);\n    fn draw_c(&self);\n    fn read_d(&self);\n}\n")))
        [f] = data["findings"]
        assert "suggested_fix" not in f

    def test_deterministic(self, dirty_source):
        assert render_json(report_for(dirty_source)) == render_json(report_for(dirty_source))


class TestText:
    def test_groups_by_file_and_summarizes(self, dirty_source):
        out = render(report_for(dirty_source))
        assert "src/lib.kl" in out
        assert "fully analyzed, 2 finding(s)" in out
        assert "ownership.stored-reference" in out
        assert "2:5" in out
        assert "fix: get_user_name" in out
        assert "Analyzed 1 file(s): 1 critical, 0 high, 1 medium, 0 low, 0 suggestion" in out
        assert "Documentation coverage: 100.0%" in out
        assert "Status: fail" in out

    def test_markup_in_messages_is_escaped(self):
        out = render(report_for("fn parse() -> Result[i32, string] {}\n"))
        assert "Result[i32, string]" in out

    def test_clean_report(self, clean_source):
        out = render(report_for(clean_source))
        assert "0 finding(s)" in out
        assert "Status: pass" in out


def test_describe_file_status():
    assert describe_file_status(FileResult(path="a")) == "fully analyzed"
    assert (
        describe_file_status(
            FileResult(path="a", status=FileStatus.PARTIAL, detail="resynchronized at line 4")
        )
        == "partially analyzed (resynchronized at line 4)"
    )
    assert (
        describe_file_status(
            FileResult(path="a", status=FileStatus.SKIPPED, detail="Permission denied")
        )
        == "skipped: Permission denied"
    )
