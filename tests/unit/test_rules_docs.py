"""Tests for the documentation rule."""

from __future__ import annotations

from klarlint.analyzer.lexer import tokenize
from klarlint.analyzer.models import Severity
from klarlint.analyzer.parser import parse
from klarlint.analyzer.rules.docs import MISSING_DOC, doc_counts


def test_undocumented_public_function(run_rule):
    [finding] = run_rule(MISSING_DOC, "pub fn open() {}\n")
    assert finding.rule == "docs.missing-doc"
    assert finding.severity == Severity.LOW
    assert "public function 'open'" in finding.message


def test_documented_public_function(run_rule):
    assert run_rule(MISSING_DOC, "/// Opens the device.\npub fn open() {}\n") == []


def test_private_items_are_not_required(run_rule):
    assert run_rule(MISSING_DOC, "fn helper() {}\nstruct Inner;\n") == []


def test_public_trait_methods_count(run_rule):
    text = "/// Storage.\npub trait Store {\n    fn get(&self);\n}\n"
    [finding] = run_rule(MISSING_DOC, text)
    assert "'get'" in finding.message


def test_doc_counts():
    arena = parse(tokenize("/// Doc.\npub fn a() {}\npub fn b() {}\nfn c() {}\n")).arena
    assert doc_counts(arena) == (2, 1)
