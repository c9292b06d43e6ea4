"""Tests for secret leakage detection."""

from __future__ import annotations

from klarlint.analyzer.models import Severity
from klarlint.analyzer.rules.secrets import LOGGED_SECRET


def wrap(statement: str) -> str:
    return f"fn handler() {{\n    {statement}\n}}\n"


class TestLoggedSecret:
    def test_password_concatenation(self, run_rule):
        findings = run_rule(LOGGED_SECRET, wrap('log.error("password=" + user.password);'))
        assert len(findings) == 1
        f = findings[0]
        assert f.rule == "secrets.logged-secret"
        assert f.severity == Severity.CRITICAL
        assert (f.line, f.column) == (2, 9)
        assert "password" in f.message

    def test_identifier_argument(self, run_rule):
        [finding] = run_rule(LOGGED_SECRET, wrap("logger::debug(auth_token);"))
        assert "token" in finding.message

    def test_print_functions(self, run_rule):
        [finding] = run_rule(LOGGED_SECRET, wrap('println!("key: {}", api_key);'))
        assert finding.line == 2

    def test_multiple_matches_in_one_call(self, run_rule):
        [finding] = run_rule(LOGGED_SECRET, wrap("log.info(secret, password);"))
        assert "password, secret" in finding.message

    def test_harmless_logging(self, run_rule):
        assert run_rule(LOGGED_SECRET, wrap('log.info("user logged in", user.name);')) == []

    def test_non_logging_call(self, run_rule):
        assert run_rule(LOGGED_SECRET, wrap("vault.store(password);")) == []

    def test_secret_in_comment_is_ignored(self, run_rule):
        assert run_rule(LOGGED_SECRET, wrap("log.info(count); // never log the password")) == []
