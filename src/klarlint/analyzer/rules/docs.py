"""Public declarations should carry doc comments."""

from __future__ import annotations

from collections.abc import Iterator

from klarlint.analyzer.lexer import TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.rules.base import Rule
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena


def doc_counts(arena: DeclarationArena) -> tuple[int, int]:
    """Return ``(public declarations, documented public declarations)``."""
    public = arena.public()
    return len(public), sum(1 for d in public if d.doc is not None)


def check_missing_doc(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for decl in arena.public():
        if decl.doc is not None:
            continue
        yield MISSING_DOC.finding(
            source,
            decl.line,
            decl.column,
            f"public {decl.kind} '{decl.name}' has no doc comment",
            suggested_fix=f"/// Describe what '{decl.name}' does.",
        )


MISSING_DOC = Rule(
    rule_id="docs.missing-doc",
    family="docs",
    severity=Severity.LOW,
    description="Public declarations have a /// doc comment.",
    check=check_missing_doc,
)

RULES = (MISSING_DOC,)
