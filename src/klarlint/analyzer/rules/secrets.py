"""Sensitive identifiers or literals passed to logging calls."""

from __future__ import annotations

import re
from collections.abc import Iterator

from klarlint.analyzer.lexer import Token, TokenKind, TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.rules.base import Rule, call_args
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena

SECRET_PATTERNS: list[re.Pattern[str]] = [
    re.compile(word, re.IGNORECASE)
    for word in (
        "password",
        "token",
        "secret",
        "api_key",
        "private_key",
        "credential",
    )
]

LOG_RECEIVERS = frozenset({"log", "logger", "logging"})
LOG_METHODS = frozenset(
    {
        "trace",
        "debug",
        "info",
        "notice",
        "warn",
        "warning",
        "error",
        "err",
        "fatal",
        "critical",
        "log",
        "print",
    }
)
PRINT_FUNCTIONS = frozenset({"print", "println", "eprint", "eprintln", "printf"})


def secret_match(tok: Token) -> str | None:
    """The secret pattern an identifier or string literal contains, if any."""
    if tok.kind != TokenKind.IDENTIFIER and not tok.is_string:
        return None
    for pattern in SECRET_PATTERNS:
        m = pattern.search(tok.text)
        if m:
            return m.group(0).lower()
    return None


def logging_calls(tokens: list[Token]) -> Iterator[tuple[Token, int]]:
    """Yield ``(callee token, index of its opening parenthesis)``."""
    for i, tok in enumerate(tokens):
        if tok.kind != TokenKind.IDENTIFIER:
            continue
        j = i + 1
        if j < len(tokens) and tokens[j].is_("!"):
            j += 1
        if j >= len(tokens) or not tokens[j].is_("("):
            continue
        prev = tokens[i - 1] if i > 0 else None
        qualified = prev is not None and (prev.is_(".") or prev.is_("::"))
        if qualified and tok.text in LOG_METHODS:
            receiver = tokens[i - 2] if i >= 2 else None
            if receiver is not None and receiver.text in LOG_RECEIVERS:
                yield tok, j
        elif not qualified and tok.text in PRINT_FUNCTIONS:
            yield tok, j


def check_logged_secret(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    significant = tokens.significant()
    for callee, open_index in logging_calls(significant):
        args, _ = call_args(significant, open_index)
        hits = sorted({m for m in (secret_match(a) for a in args) if m})
        if not hits:
            continue
        yield LOGGED_SECRET.finding(
            source,
            callee.line,
            callee.column,
            f"logging call '{callee.text}' may leak sensitive data "
            f"(matches: {', '.join(hits)}); never log secrets",
        )


LOGGED_SECRET = Rule(
    rule_id="secrets.logged-secret",
    family="secrets",
    severity=Severity.CRITICAL,
    description="Logging calls never receive passwords, tokens or keys.",
    check=check_logged_secret,
    security=True,
)

RULES = (LOGGED_SECRET,)
