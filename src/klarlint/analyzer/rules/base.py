"""Rule record and shared helpers for rule checks."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from klarlint.analyzer.lexer import Token, TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena, FunctionDecl

Check = Callable[[DeclarationArena, TokenStream, SourceFile], Iterable[Finding]]


@dataclass(frozen=True)
class Rule:
    """An independent check registered by identifier.

    ``check`` must be pure: it reads the arena, tokens and source and yields
    findings without touching shared state.
    """

    rule_id: str
    family: str
    severity: Severity
    description: str
    check: Check
    security: bool = False

    def finding(
        self,
        source: SourceFile,
        line: int,
        column: int,
        message: str,
        suggested_fix: str | None = None,
        severity: Severity | None = None,
    ) -> Finding:
        return Finding(
            rule=self.rule_id,
            severity=severity or self.severity,
            file=source.path,
            line=line,
            column=column,
            message=message,
            suggested_fix=suggested_fix,
        )


def body_tokens(tokens: TokenStream, fn: FunctionDecl) -> list[Token]:
    """Significant tokens inside a function body, braces excluded."""
    if fn.body_span is None:
        return []
    inner = [t for t in tokens.within(fn.body_span) if not t.is_comment]
    return inner[1:-1]


def call_args(tokens: list[Token], open_index: int) -> tuple[list[Token], int]:
    """Tokens between ``tokens[open_index]`` (a ``(``) and its match.

    Returns the argument tokens and the index of the closing parenthesis
    (``len(tokens)`` when unbalanced).
    """
    depth = 0
    for i in range(open_index, len(tokens)):
        tok = tokens[i]
        if tok.is_("(") or tok.is_("[") or tok.is_("{"):
            depth += 1
        elif tok.is_(")") or tok.is_("]") or tok.is_("}"):
            depth -= 1
            if depth == 0:
                return tokens[open_index + 1 : i], i
    return tokens[open_index + 1 :], len(tokens)
