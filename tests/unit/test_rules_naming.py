"""Tests for the naming rules."""

from __future__ import annotations

import pytest

from klarlint.analyzer.models import Severity
from klarlint.analyzer.rules.naming import (
    CAMEL_CASE,
    NAMING_BOOL_PREFIX,
    NAMING_CASE,
    PASCAL_CASE,
    SNAKE_CASE,
    UPPER_SNAKE_CASE,
    classify_case,
    rewrite,
    split_words,
)


class TestCaseHelpers:
    @pytest.mark.parametrize(
        "name, words",
        [
            ("getUserName", ["get", "User", "Name"]),
            ("HTTPServer", ["HTTP", "Server"]),
            ("parse_utf8_input", ["parse", "utf8", "input"]),
            ("MAX_SIZE", ["MAX", "SIZE"]),
        ],
    )
    def test_split_words(self, name, words):
        assert split_words(name) == words

    def test_classify_case(self):
        assert classify_case("read_file") == SNAKE_CASE
        assert classify_case("MAX_SIZE") == UPPER_SNAKE_CASE
        assert classify_case("ParseError") == PASCAL_CASE
        assert classify_case("getUserName") == CAMEL_CASE

    def test_rewrite(self):
        assert rewrite("getUserName", SNAKE_CASE) == "get_user_name"
        assert rewrite("maxSize", UPPER_SNAKE_CASE) == "MAX_SIZE"
        assert rewrite("parse_error", PASCAL_CASE) == "ParseError"
        assert rewrite("_privateThing", SNAKE_CASE) == "_private_thing"


class TestCaseRule:
    def test_camel_case_function(self, run_rule):
        findings = run_rule(NAMING_CASE, 'fn getUserName() -> string {\n    "x"\n}\n')
        assert len(findings) == 1
        f = findings[0]
        assert f.rule == "naming.case"
        assert f.severity == Severity.MEDIUM
        assert f.suggested_fix == "get_user_name"
        assert (f.line, f.column) == (1, 4)
        assert "camelCase" in f.message

    def test_type_names_must_be_pascal_case(self, run_rule):
        findings = run_rule(NAMING_CASE, "struct point_data {}\nenum color { red }\n")
        fixes = sorted(f.suggested_fix for f in findings)
        assert fixes == ["Color", "PointData", "Red"]

    def test_fields_constants_and_modules(self, run_rule):
        text = (
            "struct Account {\n    ownerName: String,\n}\n"
            "const maxUsers: u32 = 10;\n"
            "mod NetUtils {}\n"
        )
        fixes = sorted(f.suggested_fix for f in run_rule(NAMING_CASE, text))
        assert fixes == ["MAX_USERS", "net_utils", "owner_name"]

    def test_parameters_and_locals(self, run_rule):
        text = "fn area(rectWidth: f64) -> f64 {\n    let mut totalArea = rectWidth;\n    totalArea\n}\n"
        findings = run_rule(NAMING_CASE, text)
        assert sorted(f.suggested_fix for f in findings) == ["rect_width", "total_area"]
        local = next(f for f in findings if f.suggested_fix == "total_area")
        assert (local.line, local.column) == (2, 13)

    def test_trait_impl_methods_are_exempt(self, run_rule):
        text = "impl Iterator for Walker {\n    fn nextItem(&mut self) -> i32 { 0 }\n}\n"
        assert run_rule(NAMING_CASE, text) == []

    def test_inherent_methods_are_checked(self, run_rule):
        text = "impl Walker {\n    fn nextItem(&mut self) -> i32 { 0 }\n}\n"
        [finding] = run_rule(NAMING_CASE, text)
        assert finding.suggested_fix == "next_item"

    def test_well_named_code(self, run_rule, clean_source):
        assert run_rule(NAMING_CASE, clean_source) == []


class TestBoolPrefixRule:
    def test_bool_function(self, run_rule):
        [finding] = run_rule(NAMING_BOOL_PREFIX, "fn valid(x: i32) -> bool { x > 0 }\n")
        assert finding.rule == "naming.bool-prefix"
        assert finding.suggested_fix == "is_valid"

    def test_prefixed_names_pass(self, run_rule):
        text = (
            "fn is_valid() -> bool { true }\n"
            "fn has_items() -> bool { false }\n"
            "fn f() {\n    let can_retry: bool = true;\n    let should_stop = false;\n}\n"
        )
        assert run_rule(NAMING_BOOL_PREFIX, text) == []

    def test_bool_locals(self, run_rule):
        text = "fn f() {\n    let done: bool = false;\n    let ready = true;\n    let count = 1;\n}\n"
        findings = run_rule(NAMING_BOOL_PREFIX, text)
        assert sorted(f.suggested_fix for f in findings) == ["is_done", "is_ready"]

    def test_expression_initializer_is_not_inferred(self, run_rule):
        text = "fn f() {\n    let flag = true && other();\n}\n"
        assert run_rule(NAMING_BOOL_PREFIX, text) == []
