"""Lexer — turns Klar source text into a token stream.

Lexing is total: anything the lexer does not recognize becomes an
``UNKNOWN`` token, and it is left to the parser to decide whether that is
fatal. Comments are kept because documentation and SAFETY rules need them.
"""

from __future__ import annotations

import bisect
import enum
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import overload

from klarlint.analyzer.source import Span


class TokenKind(enum.Enum):
    """Lexical category of a token."""

    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    LITERAL = "literal"
    OPERATOR = "operator"
    COMMENT = "comment"
    DOC_COMMENT = "doc-comment"
    SAFETY_COMMENT = "safety-comment"
    UNKNOWN = "unknown"


KEYWORDS = frozenset(
    {
        "as",
        "break",
        "const",
        "continue",
        "dyn",
        "else",
        "enum",
        "fn",
        "for",
        "if",
        "impl",
        "import",
        "in",
        "let",
        "loop",
        "match",
        "mod",
        "module",
        "mut",
        "pub",
        "return",
        "self",
        "Self",
        "static",
        "struct",
        "trait",
        "type",
        "unsafe",
        "use",
        "where",
        "while",
    }
)

_COMMENT_KINDS = frozenset(
    {TokenKind.COMMENT, TokenKind.DOC_COMMENT, TokenKind.SAFETY_COMMENT}
)


@dataclass(frozen=True)
class Token:
    """A single lexical token with its location."""

    kind: TokenKind
    text: str
    start: int
    end: int
    line: int
    column: int

    @property
    def span(self) -> Span:
        return Span(self.start, self.end)

    @property
    def is_comment(self) -> bool:
        return self.kind in _COMMENT_KINDS

    @property
    def is_safety_comment(self) -> bool:
        """A ``SAFETY:`` justification, including doc-style ``/// SAFETY:``."""
        if self.kind == TokenKind.SAFETY_COMMENT:
            return True
        return self.kind == TokenKind.DOC_COMMENT and bool(_SAFETY.match(self.text[3:]))

    @property
    def is_string(self) -> bool:
        return self.kind == TokenKind.LITERAL and self.text.startswith('"')

    @property
    def end_line(self) -> int:
        return self.line + self.text.count("\n")

    def is_(self, text: str) -> bool:
        """Match a keyword or operator by its exact text."""
        return self.text == text and self.kind in (
            TokenKind.KEYWORD,
            TokenKind.OPERATOR,
        )


_WHITESPACE = re.compile(r"\s+")
_STRING = re.compile(r'"(?:[^"\\]|\\.)*"', re.DOTALL)
_CHAR = re.compile(r"'(?:\\[^'\n]{1,10}|[^'\\\n])'")
_NUMBER = re.compile(
    r"(?:0[xX][0-9a-fA-F_]+|0[bB][01_]+|0[oO][0-7_]+"
    r"|\d[\d_]*(?:\.\d[\d_]*)?(?:[eE][+-]?\d+)?)"
    r"(?:[iu](?:8|16|32|64|128|size)|f32|f64)?"
)
_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_SAFETY = re.compile(r"^\s*SAFETY:")

# Longest first so that "..=" wins over ".."
_MULTI_OPERATORS = (
    "...",
    "..=",
    "->",
    "=>",
    "::",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "..",
)
_SINGLE_OPERATORS = frozenset("{}()[]<>,;:.&*+-/%=!?|^~#@")


def iter_tokens(text: str, offset: int = 0) -> Iterator[Token]:
    """Lazily lex ``text`` starting at ``offset``.

    Restarting from an arbitrary offset is supported; the caller is
    responsible for choosing an offset on a token boundary.
    """
    pos = offset
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    length = len(text)

    while pos < length:
        ws = _WHITESPACE.match(text, pos)
        if ws:
            newlines = ws.group(0).count("\n")
            if newlines:
                line += newlines
                line_start = text.rfind("\n", pos, ws.end()) + 1
            pos = ws.end()
            continue

        kind, end = _scan_one(text, pos)
        token = Token(
            kind=kind,
            text=text[pos:end],
            start=pos,
            end=end,
            line=line,
            column=pos - line_start + 1,
        )
        yield token

        newlines = token.text.count("\n")
        if newlines:
            line += newlines
            line_start = text.rfind("\n", pos, end) + 1
        pos = end


def _scan_one(text: str, pos: int) -> tuple[TokenKind, int]:
    ch = text[pos]

    if text.startswith("//", pos):
        end = text.find("\n", pos)
        end = len(text) if end == -1 else end
        return _classify_line_comment(text[pos:end]), end

    if text.startswith("/*", pos):
        end = _block_comment_end(text, pos)
        return _classify_block_comment(text[pos:end]), end

    if ch == '"':
        m = _STRING.match(text, pos)
        if m:
            return TokenKind.LITERAL, m.end()
        # Unterminated string: swallow the rest of the line
        end = text.find("\n", pos)
        return TokenKind.UNKNOWN, len(text) if end == -1 else end

    if ch == "'":
        m = _CHAR.match(text, pos)
        if m:
            return TokenKind.LITERAL, m.end()
        return TokenKind.UNKNOWN, pos + 1

    if ch.isdigit():
        m = _NUMBER.match(text, pos)
        if m:
            return TokenKind.LITERAL, m.end()

    m = _IDENT.match(text, pos)
    if m:
        word = m.group(0)
        if word in KEYWORDS:
            return TokenKind.KEYWORD, m.end()
        if word in ("true", "false"):
            return TokenKind.LITERAL, m.end()
        return TokenKind.IDENTIFIER, m.end()

    for op in _MULTI_OPERATORS:
        if text.startswith(op, pos):
            return TokenKind.OPERATOR, pos + len(op)
    if ch in _SINGLE_OPERATORS:
        return TokenKind.OPERATOR, pos + 1

    return TokenKind.UNKNOWN, pos + 1


def _classify_line_comment(body: str) -> TokenKind:
    if body.startswith("///") and not body.startswith("////"):
        return TokenKind.DOC_COMMENT
    if _SAFETY.match(body[2:]):
        return TokenKind.SAFETY_COMMENT
    return TokenKind.COMMENT


def _classify_block_comment(body: str) -> TokenKind:
    if body.startswith("/**") and not body.startswith("/**/"):
        return TokenKind.DOC_COMMENT
    if _SAFETY.match(body[2:]):
        return TokenKind.SAFETY_COMMENT
    return TokenKind.COMMENT


def _block_comment_end(text: str, pos: int) -> int:
    """Find the end of a (possibly nested) block comment, or end of input."""
    depth = 0
    i = pos
    while i < len(text):
        if text.startswith("/*", i):
            depth += 1
            i += 2
        elif text.startswith("*/", i):
            depth -= 1
            i += 2
            if depth == 0:
                return i
        else:
            i += 1
    return len(text)


class TokenStream(Sequence[Token]):
    """A lazy, restartable, indexable view over the tokens of a text."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens: list[Token] | None = None
        self._starts: list[int] = []

    @property
    def text(self) -> str:
        return self._text

    def _materialize(self) -> list[Token]:
        if self._tokens is None:
            self._tokens = list(iter_tokens(self._text))
            self._starts = [t.start for t in self._tokens]
        return self._tokens

    @overload
    def __getitem__(self, index: int) -> Token: ...

    @overload
    def __getitem__(self, index: slice) -> list[Token]: ...

    def __getitem__(self, index):
        return self._materialize()[index]

    def __len__(self) -> int:
        return len(self._materialize())

    def __iter__(self) -> Iterator[Token]:
        return iter(self._materialize())

    def rescan(self, offset: int) -> Iterator[Token]:
        """Re-lex from ``offset`` without touching the cached tokens."""
        return iter_tokens(self._text, offset)

    def index_at(self, offset: int) -> int:
        """Index of the first token starting at or after ``offset``."""
        self._materialize()
        return bisect.bisect_left(self._starts, offset)

    def within(self, span: Span) -> list[Token]:
        """Tokens lying entirely inside ``span``."""
        tokens = self._materialize()
        lo = bisect.bisect_left(self._starts, span.start)
        hi = bisect.bisect_left(self._starts, span.end)
        return [t for t in tokens[lo:hi] if t.end <= span.end]

    def significant(self) -> list[Token]:
        """All tokens except comments."""
        return [t for t in self._materialize() if not t.is_comment]


def tokenize(text: str) -> TokenStream:
    """Lex ``text`` into a token stream. Never raises."""
    return TokenStream(text)
