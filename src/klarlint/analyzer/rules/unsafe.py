"""Unsafe audit — SAFETY justification and unchecked indexing."""

from __future__ import annotations

from collections.abc import Iterator

from klarlint.analyzer.lexer import Token, TokenKind, TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.rules.base import Rule, body_tokens, call_args
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena, FunctionDecl

_COMPARISONS = frozenset({"<", "<=", ">", ">="})


def check_safety_comment(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for region in arena.unsafe_regions:
        if region.justified:
            continue
        yield MISSING_SAFETY_COMMENT.finding(
            source,
            region.line,
            region.column,
            "unsafe block has no '// SAFETY:' comment justifying it",
            suggested_fix="// SAFETY: <explain why this block upholds memory safety>",
        )


def check_unchecked_index(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for _, fn in arena.of_type(FunctionDecl):
        body = body_tokens(tokens, fn)
        for i, tok in enumerate(body):
            if not (
                tok.kind == TokenKind.IDENTIFIER
                and tok.text.endswith("_unchecked")
                and i + 1 < len(body)
                and body[i + 1].is_("(")
            ):
                continue
            args, _ = call_args(body, i + 1)
            index = next(
                (a for a in args if a.kind == TokenKind.IDENTIFIER), None
            )
            if index is None or _bounds_established(body[:i], index.text):
                continue
            yield UNCHECKED_INDEX.finding(
                source,
                tok.line,
                tok.column,
                f"'{tok.text}({index.text})' is called without a preceding "
                f"bounds check on '{index.text}'",
                suggested_fix=f"assert({index.text} < len);",
            )


def _bounds_established(before: list[Token], name: str) -> bool:
    """True if an assert mentions ``name`` or ``name`` is compared."""
    for i, tok in enumerate(before):
        if tok.kind == TokenKind.IDENTIFIER and tok.text.startswith(
            ("assert", "debug_assert")
        ):
            j = i + 1
            if j < len(before) and before[j].is_("!"):
                j += 1
            if j < len(before) and before[j].is_("("):
                args, _ = call_args(before, j)
                if any(a.text == name for a in args):
                    return True
        if tok.text == name and tok.kind == TokenKind.IDENTIFIER:
            neighbours = before[max(0, i - 1) : i] + before[i + 1 : i + 2]
            if any(n.kind == TokenKind.OPERATOR and n.text in _COMPARISONS for n in neighbours):
                return True
    return False


MISSING_SAFETY_COMMENT = Rule(
    rule_id="unsafe.missing-safety-comment",
    family="unsafe",
    severity=Severity.CRITICAL,
    description="Every unsafe block is preceded by a SAFETY comment.",
    check=check_safety_comment,
    security=True,
)

UNCHECKED_INDEX = Rule(
    rule_id="unsafe.unchecked-index",
    family="unsafe",
    severity=Severity.HIGH,
    description="Unchecked indexing is preceded by a bounds check.",
    check=check_unchecked_index,
    security=True,
)

RULES = (MISSING_SAFETY_COMMENT, UNCHECKED_INDEX)
