"""Error-handling rules — unstructured error types and discarded results."""

from __future__ import annotations

import re
from collections.abc import Iterator

from klarlint.analyzer.lexer import Token, TokenKind, TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.rules.base import Rule, body_tokens
from klarlint.analyzer.rules.naming import PASCAL_CASE, rewrite
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena, FunctionDecl

_RESULT = re.compile(r"^Result\s*([\[<])(.*)[\]>]$")

RAW_TEXT_TYPES = frozenset(
    {"string", "String", "str", "&str", "&string", "[]u8", "[]const u8"}
)

_HANDLED = frozenset({"?", "try", "catch", "match"})


def result_params(type_ref: str | None) -> tuple[str, list[str]] | None:
    """Split ``Result[T, E]`` into its bracket style and type parameters."""
    if not type_ref:
        return None
    m = _RESULT.match(type_ref)
    if not m:
        return None
    parts: list[str] = []
    depth = 0
    current = ""
    for ch in m.group(2):
        if ch in "[<(":
            depth += 1
        elif ch in "]>)":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += ch
    parts.append(current.strip())
    return m.group(1), parts


def is_fallible(fn: FunctionDecl) -> bool:
    return result_params(fn.return_type) is not None


def check_unstructured_error(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for _, fn in arena.of_type(FunctionDecl):
        parsed = result_params(fn.return_type)
        if parsed is None:
            continue
        bracket, params = parsed
        if len(params) != 2 or params[1] not in RAW_TEXT_TYPES:
            continue
        error_name = rewrite(fn.name, PASCAL_CASE) + "Error"
        close = "]" if bracket == "[" else ">"
        yield UNSTRUCTURED_ERROR.finding(
            source,
            fn.line,
            fn.column,
            f"function '{fn.name}' returns '{fn.return_type}'; error type "
            f"'{params[1]}' is not structured, use a dedicated error enum",
            suggested_fix=f"Result{bracket}{params[0]}, {error_name}{close}",
        )


def check_discarded_error(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    fallible = {fn.name for _, fn in arena.of_type(FunctionDecl) if is_fallible(fn)}
    if not fallible:
        return
    for _, fn in arena.of_type(FunctionDecl):
        body = body_tokens(tokens, fn)
        for discard, statement in _discard_statements(body):
            callee = _callee(statement)
            if callee is None or callee.text not in fallible:
                continue
            if any(t.text in _HANDLED for t in statement):
                continue
            call_text = source.text[statement[0].start : statement[-1].end]
            yield DISCARDED_ERROR.finding(
                source,
                discard.line,
                discard.column,
                f"result of fallible call '{callee.text}' is silently discarded",
                suggested_fix=f"{call_text}?;",
            )


def _discard_statements(body: list[Token]) -> Iterator[tuple[Token, list[Token]]]:
    """Yield ``(discard token, right-hand side)`` for ``let _ = ...`` and
    ``_ = ...`` statements."""
    for i, tok in enumerate(body):
        if not (tok.kind == TokenKind.IDENTIFIER and tok.text == "_"):
            continue
        if i + 1 >= len(body) or not body[i + 1].is_("="):
            continue
        prev = body[i - 1] if i > 0 else None
        starts_statement = prev is None or prev.text in (";", "{", "}", "let")
        if not starts_statement:
            continue
        rhs = _until_semicolon(body, i + 2)
        if rhs:
            yield tok, rhs


def _until_semicolon(body: list[Token], start: int) -> list[Token]:
    depth = 0
    out: list[Token] = []
    for tok in body[start:]:
        if tok.kind == TokenKind.OPERATOR:
            if tok.text in "([{":
                depth += 1
            elif tok.text in ")]}":
                if depth == 0:
                    break
                depth -= 1
            elif tok.text == ";" and depth == 0:
                break
        out.append(tok)
    return out


def _callee(statement: list[Token]) -> Token | None:
    for i in range(1, len(statement)):
        if statement[i].is_("(") and statement[i - 1].kind == TokenKind.IDENTIFIER:
            return statement[i - 1]
    return None


UNSTRUCTURED_ERROR = Rule(
    rule_id="errors.unstructured-error",
    family="errors",
    severity=Severity.MEDIUM,
    description="Fallible functions use structured error types, not raw text.",
    check=check_unstructured_error,
)

DISCARDED_ERROR = Rule(
    rule_id="errors.discarded-error",
    family="errors",
    severity=Severity.HIGH,
    description="Results of fallible calls are never bound to a discard pattern.",
    check=check_discarded_error,
    security=True,
)

RULES = (UNSTRUCTURED_ERROR, DISCARDED_ERROR)
