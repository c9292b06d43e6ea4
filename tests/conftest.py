"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from klarlint.analyzer.lexer import tokenize
from klarlint.analyzer.models import Finding
from klarlint.analyzer.parser import parse
from klarlint.analyzer.rules.base import Rule
from klarlint.analyzer.source import SourceFile

CLEAN_SOURCE = """\
/// A point in the plane.
pub struct Point {
    x: i64,
    y: i64,
}

/// Sum of both coordinates.
pub fn coordinate_sum(p: &Point) -> i64 {
    p.x + p.y
}
"""

DIRTY_SOURCE = """\
struct Parser {
    input: &string,
}

fn getUserName() -> string {
    "name"
}
"""


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def ruleset_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "ruleset.yaml"


@pytest.fixture
def clean_source() -> str:
    return CLEAN_SOURCE


@pytest.fixture
def dirty_source() -> str:
    return DIRTY_SOURCE


@pytest.fixture
def run_rule() -> Callable[[Rule, str], list[Finding]]:
    """Lex, parse and run a single rule over ``text``."""

    def _run(rule: Rule, text: str, path: str = "test.kl") -> list[Finding]:
        tokens = tokenize(text)
        result = parse(tokens)
        return list(rule.check(result.arena, tokens, SourceFile.from_text(path, text)))

    return _run


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative path: content}`` under a fresh project directory."""

    def _make(files: dict[str, str]) -> Path:
        root = tmp_path / "project"
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        root.mkdir(exist_ok=True)
        return root

    return _make
