"""Tests for CLI commands using Click's CliRunner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from klarlint.cli import main

WIDE = {"COLUMNS": "200"}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("KLARLINT_CONFIG", raising=False)
    monkeypatch.delenv("KLARLINT_WORKERS", raising=False)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def test_main_help(runner):
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "analyze" in result.output
    assert "rules" in result.output


def test_main_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_analyze_help(runner):
    result = runner.invoke(main, ["analyze", "--help"])
    assert result.exit_code == 0
    assert "--severity-min" in result.output


class TestAnalyze:
    def test_clean_project_exits_zero(self, runner, make_project, clean_source):
        root = make_project({"src/lib.kl": clean_source})
        result = runner.invoke(main, ["analyze", str(root)], env=WIDE)
        assert result.exit_code == 0
        assert "Status: pass" in result.output

    def test_findings_exit_one(self, runner, make_project, dirty_source):
        root = make_project({"src/lib.kl": dirty_source})
        result = runner.invoke(main, ["analyze", str(root)], env=WIDE)
        assert result.exit_code == 1
        assert "ownership.stored-reference" in result.output
        assert "Status: fail" in result.output

    def test_json_output(self, runner, make_project, dirty_source):
        root = make_project({"src/lib.kl": dirty_source})
        result = runner.invoke(main, ["analyze", "--format", "json", str(root)])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["summary"]["critical"] == 1
        assert [f["rule"] for f in data["findings"]] == [
            "ownership.stored-reference",
            "naming.case",
        ]

    def test_severity_min_raises_threshold(self, runner, make_project):
        root = make_project({"lib.kl": "fn getUserName() {}\n"})
        result = runner.invoke(main, ["analyze", str(root)])
        assert result.exit_code == 0
        result = runner.invoke(main, ["analyze", "--severity-min", "medium", str(root)])
        assert result.exit_code == 1

    def test_security_rule_set(self, runner, make_project):
        root = make_project({"lib.kl": "fn getUserName() {}\n"})
        result = runner.invoke(
            main,
            ["analyze", "--rules", "security-only", "--severity-min", "suggestion",
             "--format", "json", str(root)],
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["findings"] == []

    def test_exclude(self, runner, make_project, dirty_source, clean_source):
        root = make_project({"src/lib.kl": clean_source, "vendor/dep.kl": dirty_source})
        result = runner.invoke(main, ["analyze", "-e", "vendor/*,gen/*", str(root)])
        assert result.exit_code == 0

    def test_output_file(self, runner, make_project, dirty_source, tmp_path: Path):
        root = make_project({"src/lib.kl": dirty_source})
        out = tmp_path / "report.json"
        result = runner.invoke(
            main, ["analyze", "--format", "json", "-o", str(out), "-j", "2", str(root)]
        )
        assert result.exit_code == 1
        assert json.loads(out.read_text())["summary"]["status"] == "fail"

    def test_unwritable_output_exits_two(self, runner, make_project, dirty_source, tmp_path: Path):
        root = make_project({"src/lib.kl": dirty_source})
        out = tmp_path / "nodir" / "report.txt"
        result = runner.invoke(main, ["analyze", "-o", str(out), str(root)])
        assert result.exit_code == 2
        assert "Cannot write report" in result.output
        assert not out.exists()

    def test_missing_path_exits_two(self, runner, tmp_path: Path):
        result = runner.invoke(main, ["analyze", str(tmp_path / "nope")])
        assert result.exit_code == 2
        assert "does not exist" in result.output

    def test_invalid_config_exits_two(self, runner, make_project, tmp_path: Path):
        root = make_project({"lib.kl": ""})
        bad = tmp_path / "bad.yaml"
        bad.write_text("rules:\n  naming.nope: true\n")
        result = runner.invoke(main, ["--config", str(bad), "analyze", str(root)])
        assert result.exit_code == 2
        assert "Unknown rule id" in result.output

    def test_config_file_toggles(self, runner, make_project, dirty_source, tmp_path: Path):
        root = make_project({"lib.kl": dirty_source})
        config = tmp_path / "rules.yaml"
        config.write_text("rules:\n  ownership.stored-reference: false\n")
        result = runner.invoke(
            main, ["--config", str(config), "analyze", "--format", "json", str(root)]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["rules"] == {"naming.case": 1}

    def test_project_config_is_picked_up(self, runner, tmp_path: Path):
        (tmp_path / ".klarlint.yaml").write_text("severity_min: suggestion\nrule_set: security\n")
        (tmp_path / "lib.kl").write_text("fn getUserName() {}\n")
        result = runner.invoke(main, ["analyze", "--format", "json", "lib.kl"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["findings"] == []


class TestRules:
    def test_lists_rules(self, runner):
        result = runner.invoke(main, ["rules"], env=WIDE)
        assert result.exit_code == 0
        assert "naming.case" in result.output
        assert "secrets.logged-secret" in result.output

    def test_security_view(self, runner):
        result = runner.invoke(main, ["rules", "--rules", "security"], env=WIDE)
        assert result.exit_code == 0
        assert "Rules (security)" in result.output
