"""Naming rules — case conventions and boolean prefixes."""

from __future__ import annotations

import re
from collections.abc import Iterator

from klarlint.analyzer.lexer import Token, TokenKind, TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.rules.base import Rule, body_tokens
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import (
    ConstDecl,
    DeclarationArena,
    EnumDecl,
    FunctionDecl,
    ImplDecl,
    ModuleDecl,
    StructDecl,
    TraitDecl,
)

BOOL_PREFIXES = ("is_", "has_", "can_", "should_", "was_", "will_")

_WORD = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+\d*|[A-Z]+\d*|\d+")

_SNAKE = re.compile(r"_*[a-z][a-z0-9]*(?:_[a-z0-9]+)*")
_UPPER_SNAKE = re.compile(r"_*[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*")
_PASCAL = re.compile(r"[A-Z][a-zA-Z0-9]*")

SNAKE_CASE = "snake_case"
UPPER_SNAKE_CASE = "UPPER_SNAKE_CASE"
PASCAL_CASE = "PascalCase"
CAMEL_CASE = "camelCase"
MIXED_CASE = "mixed case"


def split_words(name: str) -> list[str]:
    """Segment an identifier on underscores and letter-case transitions."""
    words: list[str] = []
    for part in name.split("_"):
        words.extend(_WORD.findall(part))
    return words


def classify_case(name: str) -> str:
    """Describe the case shape of an identifier."""
    if _SNAKE.fullmatch(name):
        return SNAKE_CASE
    if "_" in name.strip("_") or name.isupper():
        return UPPER_SNAKE_CASE if _UPPER_SNAKE.fullmatch(name) else MIXED_CASE
    if _PASCAL.fullmatch(name):
        return PASCAL_CASE
    if re.fullmatch(r"[a-z][a-zA-Z0-9]*", name):
        return CAMEL_CASE
    return MIXED_CASE


def matches_case(name: str, convention: str) -> bool:
    if convention == SNAKE_CASE:
        return bool(_SNAKE.fullmatch(name))
    if convention == UPPER_SNAKE_CASE:
        return bool(_UPPER_SNAKE.fullmatch(name))
    return bool(_PASCAL.fullmatch(name)) and "_" not in name


def rewrite(name: str, convention: str) -> str:
    """Rewrite ``name`` into the given case convention."""
    prefix = name[: len(name) - len(name.lstrip("_"))]
    words = split_words(name)
    if not words:
        return name
    if convention == SNAKE_CASE:
        return prefix + "_".join(w.lower() for w in words)
    if convention == UPPER_SNAKE_CASE:
        return prefix + "_".join(w.upper() for w in words)
    return "".join(w[:1].upper() + w[1:].lower() for w in words)


def _is_trait_impl_method(arena: DeclarationArena, fn: FunctionDecl) -> bool:
    if fn.parent is None:
        return False
    parent = arena[fn.parent]
    return isinstance(parent, ImplDecl) and parent.trait is not None


def _named_items(
    arena: DeclarationArena, tokens: TokenStream
) -> Iterator[tuple[str, str, int, int, str]]:
    """Yield ``(what, name, line, column, convention)`` for every binding."""
    for decl in arena:
        if isinstance(decl, (StructDecl, EnumDecl, TraitDecl)):
            yield decl.kind, decl.name, decl.line, decl.column, PASCAL_CASE
        if isinstance(decl, StructDecl):
            for f in decl.fields:
                if not f.name.isdigit():
                    yield "field", f.name, f.line, f.column, SNAKE_CASE
        elif isinstance(decl, EnumDecl):
            for v in decl.variants:
                yield "enum variant", v.name, v.line, v.column, PASCAL_CASE
        elif isinstance(decl, ModuleDecl):
            yield "module", decl.name, decl.line, decl.column, SNAKE_CASE
        elif isinstance(decl, ConstDecl):
            what = "static" if decl.is_static else "constant"
            yield what, decl.name, decl.line, decl.column, UPPER_SNAKE_CASE
        elif isinstance(decl, FunctionDecl):
            if not _is_trait_impl_method(arena, decl):
                yield "function", decl.name, decl.line, decl.column, SNAKE_CASE
            for p in decl.params:
                yield "parameter", p.name, p.line, p.column, SNAKE_CASE
            for tok, _ in let_bindings(body_tokens(tokens, decl)):
                yield "variable", tok.text, tok.line, tok.column, SNAKE_CASE


def let_bindings(body: list[Token]) -> Iterator[tuple[Token, bool]]:
    """Yield ``(name token, is_boolean)`` for simple ``let`` bindings."""
    for i, tok in enumerate(body):
        if not tok.is_("let"):
            continue
        j = i + 1
        if j < len(body) and body[j].is_("mut"):
            j += 1
        if j >= len(body) or body[j].kind != TokenKind.IDENTIFIER:
            continue
        name = body[j]
        rest = body[j + 1 : j + 4]
        is_bool = False
        if len(rest) >= 2 and rest[0].is_(":") and rest[1].text == "bool":
            is_bool = True
        elif (
            len(rest) >= 2
            and rest[0].is_("=")
            and rest[1].text in ("true", "false")
            and (len(rest) < 3 or rest[2].is_(";"))
        ):
            is_bool = True
        yield name, is_bool


def check_case(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for what, name, line, column, convention in _named_items(arena, tokens):
        if name.strip("_") == "" or matches_case(name, convention):
            continue
        expected = rewrite(name, convention)
        yield NAMING_CASE.finding(
            source,
            line,
            column,
            f"{what} '{name}' should be {convention} "
            f"(found {classify_case(name)}); rename to '{expected}'",
            suggested_fix=expected,
        )


def check_bool_prefix(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for _, fn in arena.of_type(FunctionDecl):
        if fn.return_type == "bool" and not _is_trait_impl_method(arena, fn):
            if not fn.name.startswith(BOOL_PREFIXES):
                yield _bool_finding(source, "function", fn.name, fn.line, fn.column)
        for tok, is_bool in let_bindings(body_tokens(tokens, fn)):
            if is_bool and not tok.text.startswith(BOOL_PREFIXES):
                yield _bool_finding(source, "variable", tok.text, tok.line, tok.column)


def _bool_finding(
    source: SourceFile, what: str, name: str, line: int, column: int
) -> Finding:
    fixed = "is_" + rewrite(name, SNAKE_CASE).lstrip("_")
    return NAMING_BOOL_PREFIX.finding(
        source,
        line,
        column,
        f"boolean {what} '{name}' should start with one of "
        f"{', '.join(BOOL_PREFIXES)}",
        suggested_fix=fixed,
    )


NAMING_CASE = Rule(
    rule_id="naming.case",
    family="naming",
    severity=Severity.MEDIUM,
    description="Identifiers follow the case convention of their declaration kind.",
    check=check_case,
)

NAMING_BOOL_PREFIX = Rule(
    rule_id="naming.bool-prefix",
    family="naming",
    severity=Severity.MEDIUM,
    description="Boolean functions and variables start with is_/has_/can_/...",
    check=check_bool_prefix,
)

RULES = (NAMING_CASE, NAMING_BOOL_PREFIX)
