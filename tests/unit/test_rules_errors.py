"""Tests for the error-handling rules."""

from __future__ import annotations

from klarlint.analyzer.models import Severity
from klarlint.analyzer.rules.errors import (
    DISCARDED_ERROR,
    UNSTRUCTURED_ERROR,
    result_params,
)


class TestResultParams:
    def test_square_brackets(self):
        assert result_params("Result[Vec<u8>, ReadError]") == ("[", ["Vec<u8>", "ReadError"])

    def test_angle_brackets_with_nesting(self):
        assert result_params("Result<Map<K, V>, string>") == ("<", ["Map<K, V>", "string"])

    def test_not_a_result(self):
        assert result_params("Option<i32>") is None
        assert result_params(None) is None


class TestUnstructuredError:
    def test_string_error(self, run_rule):
        [finding] = run_rule(
            UNSTRUCTURED_ERROR, "fn read_config(path: &str) -> Result[Config, string] {}\n"
        )
        assert finding.severity == Severity.MEDIUM
        assert finding.suggested_fix == "Result[Config, ReadConfigError]"

    def test_angle_bracket_style_is_preserved(self, run_rule):
        [finding] = run_rule(UNSTRUCTURED_ERROR, "fn parse() -> Result<i32, String> {}\n")
        assert finding.suggested_fix == "Result<i32, ParseError>"

    def test_structured_error_passes(self, run_rule):
        assert run_rule(UNSTRUCTURED_ERROR, "fn parse() -> Result<i32, ParseError> {}\n") == []


FALLIBLE = "fn save(data: &str) -> Result[(), SaveError] {}\n"


class TestDiscardedError:
    def test_let_discard(self, run_rule):
        text = FALLIBLE + "fn run() {\n    let _ = save(\"x\");\n}\n"
        [finding] = run_rule(DISCARDED_ERROR, text)
        assert finding.rule == "errors.discarded-error"
        assert finding.severity == Severity.HIGH
        assert (finding.line, finding.column) == (3, 9)
        assert finding.suggested_fix == 'save("x")?;'

    def test_bare_discard(self, run_rule):
        text = FALLIBLE + "fn run() {\n    _ = store.save(data);\n}\n"
        [finding] = run_rule(DISCARDED_ERROR, text)
        assert finding.suggested_fix == "store.save(data)?;"

    def test_propagated_error_passes(self, run_rule):
        text = FALLIBLE + "fn run() -> Result[(), SaveError] {\n    let _ = save(\"x\")?;\n}\n"
        assert run_rule(DISCARDED_ERROR, text) == []

    def test_bound_result_passes(self, run_rule):
        text = FALLIBLE + "fn run() {\n    let outcome = save(\"x\");\n}\n"
        assert run_rule(DISCARDED_ERROR, text) == []

    def test_infallible_callee_passes(self, run_rule):
        text = "fn log_line(s: &str) {}\nfn run() {\n    let _ = log_line(\"x\");\n}\n"
        assert run_rule(DISCARDED_ERROR, text) == []
