"""Structural parser — token stream to a flat declaration arena.

Single-pass recursive descent over the significant (non-comment) tokens.
Function bodies are kept as opaque spans; rules that need body detail
re-scan the body's tokens. A malformed item is dropped, recorded as a
``ParseIssue``, and parsing resumes at the next declaration keyword that
starts a line (or, inside an ``impl``/``trait``/``mod`` body, at the
body's closing brace).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from klarlint.analyzer.lexer import Token, TokenKind, TokenStream
from klarlint.analyzer.source import Span
from klarlint.analyzer.syntax import (
    ConstDecl,
    Declaration,
    DeclarationArena,
    DocComment,
    EnumDecl,
    Field,
    FunctionDecl,
    ImplDecl,
    ModuleDecl,
    Parameter,
    PassingMode,
    StructDecl,
    TraitDecl,
    UnsafeRegion,
    Variant,
)
from klarlint.errors import ParseError

logger = logging.getLogger(__name__)

_RESYNC_KEYWORDS = frozenset(
    {
        "fn",
        "pub",
        "struct",
        "enum",
        "trait",
        "impl",
        "const",
        "static",
        "mod",
        "module",
        "use",
        "import",
        "type",
        "unsafe",
    }
)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())


@dataclass(frozen=True)
class ParseIssue:
    """A recovered syntax error."""

    message: str
    line: int
    column: int
    resync_line: int | None = None


@dataclass(frozen=True)
class ParseResult:
    """Declarations parsed from one file plus any recovered errors."""

    arena: DeclarationArena
    errors: tuple[ParseIssue, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


def parse(tokens: TokenStream) -> ParseResult:
    """Parse a token stream into a declaration arena. Never raises."""
    return _Parser(tokens).parse()


class _Parser:
    def __init__(self, tokens: TokenStream) -> None:
        self._all: list[Token] = list(tokens)
        self._sig: list[int] = [
            i for i, t in enumerate(self._all) if not t.is_comment
        ]
        self._pos = 0
        self._decls: list[Declaration | None] = []
        self._errors: list[ParseIssue] = []

    # -- token cursor -----------------------------------------------------

    def _peek(self, ahead: int = 0) -> Token | None:
        idx = self._pos + ahead
        if idx < len(self._sig):
            return self._all[self._sig[idx]]
        return None

    def _next(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise self._eof_error("unexpected end of input")
        self._pos += 1
        return tok

    def _at(self, text: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.is_(text)

    def _accept(self, text: str) -> Token | None:
        if self._at(text):
            return self._next()
        return None

    def _expect(self, text: str) -> Token:
        tok = self._peek()
        if tok is None:
            raise self._eof_error(f"expected '{text}' but reached end of input")
        if not tok.is_(text):
            raise _error(f"expected '{text}', found '{tok.text}'", tok)
        return self._next()

    def _expect_ident(self, what: str) -> Token:
        tok = self._peek()
        if tok is None:
            raise self._eof_error(f"expected {what} but reached end of input")
        if tok.kind != TokenKind.IDENTIFIER:
            raise _error(f"expected {what}, found '{tok.text}'", tok)
        return self._next()

    def _prev_end(self) -> int:
        if self._pos == 0:
            return 0
        return self._all[self._sig[self._pos - 1]].end

    def _eof_error(self, message: str) -> ParseError:
        last = self._all[self._sig[-1]] if self._sig else None
        if last is None:
            return ParseError(message, 1, 1, 0)
        return ParseError(message, last.line, last.column, last.end)

    # -- driver -----------------------------------------------------------

    def parse(self) -> ParseResult:
        while self._peek() is not None:
            start = self._pos
            checkpoint = len(self._decls)
            try:
                self._parse_item(parent=None)
            except ParseError as e:
                del self._decls[checkpoint:]
                self._record(e, self._resync(start))

        decls = tuple(d for d in self._decls if d is not None)
        regions = self._collect_unsafe_regions(decls)
        return ParseResult(
            arena=DeclarationArena(declarations=decls, unsafe_regions=regions),
            errors=tuple(self._errors),
        )

    def _record(self, e: ParseError, resync: Token | None) -> None:
        self._errors.append(
            ParseIssue(
                message=e.message,
                line=e.line,
                column=e.column,
                resync_line=resync.line if resync else None,
            )
        )
        logger.debug(
            "Parse error at %d:%d (%s), resynchronized at %s",
            e.line,
            e.column,
            e.message,
            f"line {resync.line}" if resync else "end of input",
        )

    def _resync(self, start: int) -> Token | None:
        """Skip to the next declaration keyword at column 1 after ``start``."""
        self._pos = start + 1
        while True:
            tok = self._peek()
            if tok is None:
                return None
            if (
                tok.column == 1
                and tok.kind == TokenKind.KEYWORD
                and tok.text in _RESYNC_KEYWORDS
            ):
                return tok
            self._pos += 1

    def _resync_in_body(self, start: int) -> Token | None:
        """Skip to the next item inside an enclosing ``{ ... }`` body.

        Stops at a declaration keyword that begins a line, or at the
        body's closing brace. Returns ``None`` at end of input.
        """
        self._pos = start + 1
        depth = 0
        while True:
            tok = self._peek()
            if tok is None:
                return None
            if tok.kind == TokenKind.OPERATOR:
                if tok.text == "{":
                    depth += 1
                elif tok.text == "}":
                    if depth == 0:
                        return tok
                    depth -= 1
            elif (
                depth == 0
                and tok.kind == TokenKind.KEYWORD
                and tok.text in _RESYNC_KEYWORDS
                and self._starts_line(self._pos)
            ):
                return tok
            self._pos += 1

    def _starts_line(self, pos: int) -> bool:
        if pos == 0:
            return True
        return self._all[self._sig[pos - 1]].line != self._all[self._sig[pos]].line

    # -- items ------------------------------------------------------------

    def _parse_item(self, parent: int | None, default_public: bool = False) -> None:
        first = self._peek()
        if first is None:
            raise self._eof_error("expected a declaration")
        doc = self._doc_before(self._sig[self._pos])

        self._skip_attributes()
        # doc comments may also sit between the attributes and the item
        if doc is None and self._peek() is not first and self._peek() is not None:
            doc = self._doc_before(self._sig[self._pos])
        is_public = default_public
        if self._accept("pub"):
            is_public = True
            if self._at("("):
                self._skip_balanced()
        is_unsafe = bool(self._accept("unsafe"))

        tok = self._peek()
        if tok is None:
            raise self._eof_error("expected a declaration")
        word = tok.text if tok.kind == TokenKind.KEYWORD else ""

        if word == "fn":
            self._parse_function(parent, first, is_public, is_unsafe, doc)
        elif word == "struct":
            self._parse_struct(parent, first, is_public, doc)
        elif word == "enum":
            self._parse_enum(parent, first, is_public, doc)
        elif word == "trait":
            self._parse_trait(parent, first, is_public, doc)
        elif word == "impl":
            self._parse_impl(parent, first)
        elif word in ("const", "static"):
            self._parse_const(parent, first, is_public, doc)
        elif word in ("mod", "module"):
            self._parse_module(parent, first, is_public, doc)
        elif word in ("use", "import"):
            self._skip_header()
        elif word == "type":
            self._next()
            self._collect({";"}, track_angle=True)
            self._expect(";")
        else:
            raise _error(f"unexpected token '{tok.text}'", tok)

    def _skip_attributes(self) -> None:
        while True:
            if self._at("#"):
                self._next()
                self._accept("!")
                if not self._at("["):
                    raise _error("expected '[' after '#'", self._peek() or self._all[-1])
                self._skip_balanced()
            elif self._at("@"):
                self._next()
                self._expect_ident("attribute name")
                if self._at("("):
                    self._skip_balanced()
            else:
                return

    def _skip_header(self) -> None:
        """Skip a ``use``/``import`` header up to ``;`` or end of line."""
        head = self._next()
        stack: list[str] = []
        while True:
            tok = self._peek()
            if tok is None:
                return
            if not stack and tok.is_(";"):
                self._next()
                return
            if not stack and tok.line != head.line:
                return
            if tok.text in _OPENERS and tok.kind == TokenKind.OPERATOR:
                stack.append(_OPENERS[tok.text])
            elif tok.text in _CLOSERS and tok.kind == TokenKind.OPERATOR:
                if not stack or stack.pop() != tok.text:
                    raise _error(f"mismatched delimiter '{tok.text}'", tok)
            self._next()

    def _parse_function(
        self,
        parent: int | None,
        first: Token,
        is_public: bool,
        is_unsafe: bool,
        doc: DocComment | None,
    ) -> None:
        self._expect("fn")
        name = self._expect_ident("function name")
        generics, bounds = self._parse_generics()
        self._expect("(")
        receiver, params = self._parse_params()
        return_type = None
        if self._accept("->"):
            return_type = _normalize(
                self._collect({"{", ";", "where"}, track_angle=True)
            )
        if self._at("where"):
            bounds = bounds + self._parse_where()

        body_span = None
        if self._at("{"):
            body_span = self._skip_balanced()
        elif not self._accept(";"):
            tok = self._peek()
            if tok is None:
                raise self._eof_error(f"expected body for function '{name.text}'")
            raise _error(f"expected body for function '{name.text}'", tok)

        self._decls.append(
            FunctionDecl(
                name=name.text,
                span=Span(first.start, self._prev_end()),
                line=name.line,
                column=name.column,
                parent=parent,
                is_public=is_public,
                doc=doc,
                generics=generics,
                bounds=bounds,
                params=params,
                receiver=receiver,
                return_type=return_type,
                body_span=body_span,
                is_unsafe=is_unsafe,
            )
        )

    def _parse_params(self) -> tuple[str | None, tuple[Parameter, ...]]:
        receiver: str | None = None
        params: list[Parameter] = []
        while not self._at(")"):
            group = self._collect({",", ")"}, track_angle=True)
            self._accept(",")
            if not group:
                continue
            texts = [t.text for t in group]
            colon = _index_of(group, ":")
            if "self" in texts and (colon is None or texts.index("self") < colon):
                receiver = _normalize(group)
                continue
            if colon is None:
                raise _error(f"expected ':' in parameter '{group[0].text}'", group[0])
            names = [t for t in group[:colon] if t.kind == TokenKind.IDENTIFIER]
            if not names:
                raise _error("expected parameter name", group[0])
            type_ref = _normalize(group[colon + 1 :])
            params.append(
                Parameter(
                    name=names[-1].text,
                    type_ref=type_ref,
                    mode=PassingMode.from_type(type_ref),
                    line=names[-1].line,
                    column=names[-1].column,
                )
            )
        self._expect(")")
        return receiver, tuple(params)

    def _parse_generics(self) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Parse ``<T: Bound, U>`` or ``[T: Bound]`` after a name."""
        if self._at("<"):
            self._next()
            inner = self._collect({">"}, track_angle=True)
            self._expect(">")
        elif self._at("["):
            self._next()
            inner = self._collect({"]"}, track_angle=True)
            self._expect("]")
        else:
            return (), ()

        generics: list[str] = []
        bounds: list[str] = []
        for part in _split_top_level(inner):
            if not part:
                continue
            generics.append(part[0].text)
            if _index_of(part, ":") is not None:
                bounds.append(_normalize(part))
        return tuple(generics), tuple(bounds)

    def _parse_where(self) -> tuple[str, ...]:
        self._expect("where")
        clause = self._collect({"{", ";"}, track_angle=True)
        return tuple(_normalize(p) for p in _split_top_level(clause) if p)

    def _parse_struct(
        self,
        parent: int | None,
        first: Token,
        is_public: bool,
        doc: DocComment | None,
    ) -> None:
        self._expect("struct")
        name = self._expect_ident("struct name")
        generics, bounds = self._parse_generics()
        if self._at("where"):
            bounds = bounds + self._parse_where()

        fields: list[Field] = []
        if self._accept("{"):
            while not self._at("}"):
                if self._peek() is None:
                    raise _error("unterminated block", first)
                self._skip_attributes()
                field_public = bool(self._accept("pub"))
                field_name = self._expect_ident("field name")
                self._expect(":")
                type_tokens = self._collect({",", "}"}, track_angle=True)
                colon = _index_of(type_tokens, ":")
                if colon is not None:
                    # `a: i32 b: &T` - a separator is missing; rewind to `b`
                    if colon < 2:
                        raise _error(f"missing type for field '{field_name.text}'", field_name)
                    following = type_tokens[colon - 1]
                    self._pos -= len(type_tokens) - (colon - 1)
                    type_tokens = type_tokens[: colon - 1]
                    self._record(
                        _error(f"expected ',' before field '{following.text}'", following),
                        following,
                    )
                if not type_tokens:
                    raise _error(f"missing type for field '{field_name.text}'", field_name)
                fields.append(
                    Field(
                        name=field_name.text,
                        type_ref=_normalize(type_tokens),
                        is_public=field_public,
                        line=field_name.line,
                        column=field_name.column,
                        span=Span(field_name.start, type_tokens[-1].end),
                    )
                )
                self._accept(",")
            self._expect("}")
        elif self._accept("("):
            for i, part in enumerate(_split_top_level(self._collect({")"}, track_angle=True))):
                if not part:
                    continue
                public = part[0].is_("pub")
                type_tokens = part[1:] if public else part
                fields.append(
                    Field(
                        name=str(i),
                        type_ref=_normalize(type_tokens),
                        is_public=public,
                        line=part[0].line,
                        column=part[0].column,
                        span=Span(part[0].start, part[-1].end),
                    )
                )
            self._expect(")")
            self._expect(";")
        else:
            self._expect(";")

        self._decls.append(
            StructDecl(
                name=name.text,
                span=Span(first.start, self._prev_end()),
                line=name.line,
                column=name.column,
                parent=parent,
                is_public=is_public,
                doc=doc,
                generics=generics,
                bounds=bounds,
                fields=tuple(fields),
            )
        )

    def _parse_enum(
        self,
        parent: int | None,
        first: Token,
        is_public: bool,
        doc: DocComment | None,
    ) -> None:
        self._expect("enum")
        name = self._expect_ident("enum name")
        generics, bounds = self._parse_generics()
        if self._at("where"):
            bounds = bounds + self._parse_where()
        self._expect("{")

        variants: list[Variant] = []
        while not self._at("}"):
            if self._peek() is None:
                raise _error("unterminated block", first)
            self._skip_attributes()
            vname = self._expect_ident("variant name")
            end = vname.end
            if self._at("(") or self._at("{"):
                end = self._skip_balanced().end
            if self._accept("="):
                value = self._collect({",", "}"})
                if value:
                    end = value[-1].end
            variants.append(
                Variant(
                    name=vname.text,
                    line=vname.line,
                    column=vname.column,
                    span=Span(vname.start, end),
                )
            )
            if not self._accept(","):
                break
        self._expect("}")

        self._decls.append(
            EnumDecl(
                name=name.text,
                span=Span(first.start, self._prev_end()),
                line=name.line,
                column=name.column,
                parent=parent,
                is_public=is_public,
                doc=doc,
                generics=generics,
                bounds=bounds,
                variants=tuple(variants),
            )
        )

    def _parse_trait(
        self,
        parent: int | None,
        first: Token,
        is_public: bool,
        doc: DocComment | None,
    ) -> None:
        self._expect("trait")
        name = self._expect_ident("trait name")
        generics, bounds = self._parse_generics()
        if self._accept(":"):
            supertraits = self._collect({"{", "where"}, track_angle=True)
            bounds = bounds + (_normalize(supertraits),)
        if self._at("where"):
            bounds = bounds + self._parse_where()

        index = self._reserve()
        self._parse_body(index, first, default_public=is_public)

        self._decls[index] = TraitDecl(
            name=name.text,
            span=Span(first.start, self._prev_end()),
            line=name.line,
            column=name.column,
            parent=parent,
            is_public=is_public,
            doc=doc,
            generics=generics,
            bounds=bounds,
            methods=self._child_functions(index),
        )

    def _parse_impl(self, parent: int | None, first: Token) -> None:
        impl_tok = self._expect("impl")
        generics: tuple[str, ...] = ()
        bounds: tuple[str, ...] = ()
        nxt = self._peek()
        # impl<T> / impl[T] only when the bracket hugs the keyword
        if nxt is not None and nxt.start == impl_tok.end and nxt.text in ("<", "["):
            generics, bounds = self._parse_generics()

        first_type = _normalize(self._collect({"for", "{", "where"}, track_angle=True))
        trait = None
        target = first_type
        if self._accept("for"):
            trait = first_type
            target = _normalize(self._collect({"{", "where"}, track_angle=True))
        if not target:
            raise _error("expected type after 'impl'", impl_tok)
        if self._at("where"):
            bounds = bounds + self._parse_where()

        index = self._reserve()
        self._parse_body(index, first, default_public=False)

        self._decls[index] = ImplDecl(
            target=target,
            span=Span(first.start, self._prev_end()),
            line=impl_tok.line,
            column=impl_tok.column,
            parent=parent,
            trait=trait,
            generics=generics,
            bounds=bounds,
            methods=self._child_functions(index),
        )

    def _parse_const(
        self,
        parent: int | None,
        first: Token,
        is_public: bool,
        doc: DocComment | None,
    ) -> None:
        keyword = self._next()
        self._accept("mut")
        name = self._expect_ident("constant name")
        type_ref = ""
        if self._accept(":"):
            type_ref = _normalize(self._collect({"=", ";"}, track_angle=True))
        if self._accept("="):
            self._collect({";"})
        self._expect(";")
        self._decls.append(
            ConstDecl(
                name=name.text,
                span=Span(first.start, self._prev_end()),
                line=name.line,
                column=name.column,
                parent=parent,
                is_public=is_public,
                doc=doc,
                type_ref=type_ref,
                is_static=keyword.text == "static",
            )
        )

    def _parse_module(
        self,
        parent: int | None,
        first: Token,
        is_public: bool,
        doc: DocComment | None,
    ) -> None:
        self._next()
        name = self._expect_ident("module name")
        if self._accept(";"):
            return
        index = self._reserve()
        self._parse_body(index, first, default_public=False)
        self._decls[index] = ModuleDecl(
            name=name.text,
            span=Span(first.start, self._prev_end()),
            line=name.line,
            column=name.column,
            parent=parent,
            is_public=is_public,
            doc=doc,
            items=tuple(i for i, d in enumerate(self._decls) if d is not None and d.parent == index),
        )

    def _parse_body(self, index: int, first: Token, default_public: bool) -> None:
        """Parse ``{ item* }`` with every item parented to ``index``.

        A malformed item is dropped on its own; items parsed before it
        stay. Running off the end of input fails the enclosing item.
        """
        self._expect("{")
        while not self._at("}"):
            if self._peek() is None:
                raise _error("unterminated block", first)
            start = self._pos
            checkpoint = len(self._decls)
            try:
                self._parse_item(parent=index, default_public=default_public)
            except ParseError as e:
                del self._decls[checkpoint:]
                resync = self._resync_in_body(start)
                if resync is None:
                    raise
                self._record(e, resync)
        self._expect("}")

    def _reserve(self) -> int:
        self._decls.append(None)
        return len(self._decls) - 1

    def _child_functions(self, index: int) -> tuple[int, ...]:
        return tuple(
            i
            for i, d in enumerate(self._decls)
            if isinstance(d, FunctionDecl) and d.parent == index
        )

    # -- token groups -----------------------------------------------------

    def _collect(self, terminators: set[str], track_angle: bool = False) -> list[Token]:
        """Collect tokens up to a terminator at nesting depth zero.

        The terminator itself is not consumed.
        """
        out: list[Token] = []
        stack: list[tuple[str, Token]] = []
        angle = 0
        while True:
            tok = self._peek()
            if tok is None:
                if stack:
                    raise _error("unterminated block", stack[-1][1])
                raise self._eof_error(
                    "expected " + " or ".join(f"'{t}'" for t in sorted(terminators))
                )
            structural = tok.kind in (TokenKind.OPERATOR, TokenKind.KEYWORD)
            if structural and not stack and angle == 0 and tok.text in terminators:
                return out
            if tok.kind == TokenKind.OPERATOR:
                if tok.text in _OPENERS:
                    stack.append((_OPENERS[tok.text], tok))
                elif tok.text in _CLOSERS:
                    if not stack or stack[-1][0] != tok.text:
                        raise _error(f"mismatched delimiter '{tok.text}'", tok)
                    stack.pop()
                elif track_angle and not stack and tok.text == "<":
                    angle += 1
                elif track_angle and not stack and tok.text == ">" and angle:
                    angle -= 1
            out.append(tok)
            self._next()

    def _skip_balanced(self) -> Span:
        """Skip a balanced ``(...)``, ``[...]`` or ``{...}`` group."""
        open_tok = self._next()
        stack = [(_OPENERS[open_tok.text], open_tok)]
        while stack:
            tok = self._peek()
            if tok is None:
                raise _error("unterminated block", stack[-1][1])
            if tok.kind == TokenKind.OPERATOR:
                if tok.text in _OPENERS:
                    stack.append((_OPENERS[tok.text], tok))
                elif tok.text in _CLOSERS:
                    if stack[-1][0] != tok.text:
                        raise _error(f"mismatched delimiter '{tok.text}'", tok)
                    stack.pop()
            self._next()
        return Span(open_tok.start, self._prev_end())

    # -- comments ---------------------------------------------------------

    def _doc_before(self, all_idx: int) -> DocComment | None:
        """The contiguous doc-comment block ending on the line above the
        token at ``all_idx``."""
        first = self._all[all_idx]
        j = all_idx - 1
        lines: list[Token] = []
        expected = first.line - 1
        while j >= 0:
            tok = self._all[j]
            if tok.kind != TokenKind.DOC_COMMENT or tok.end_line < expected:
                break
            lines.append(tok)
            expected = tok.line - 1
            j -= 1
        if not lines:
            return None
        lines.reverse()
        return DocComment(
            text="\n".join(t.text for t in lines),
            line=lines[0].line,
            end_line=lines[-1].end_line,
        )

    def _collect_unsafe_regions(
        self, decls: tuple[Declaration, ...]
    ) -> tuple[UnsafeRegion, ...]:
        """Every ``unsafe { ... }`` block inside a parsed declaration,
        including ``const``/``static`` initializers."""
        spans = [d.span for d in decls if d.parent is None]
        bodies = [
            (i, d.body_span)
            for i, d in enumerate(decls)
            if isinstance(d, FunctionDecl) and d.body_span is not None
        ]
        sig = [(i, self._all[i]) for i in self._sig]
        limit = self._all[-1].end if self._all else 0
        regions: list[UnsafeRegion] = []
        for k, (all_idx, tok) in enumerate(sig):
            if not (tok.is_("unsafe") and k + 1 < len(sig) and sig[k + 1][1].is_("{")):
                continue
            if not any(tok.start in span for span in spans):
                continue
            enclosing = [(body.start, i) for i, body in bodies if tok.start in body]
            end = _matching_brace_end(sig, k + 1, limit)
            comment, justified = self._preceding_comment(all_idx, tok)
            regions.append(
                UnsafeRegion(
                    span=Span(tok.start, end),
                    line=tok.line,
                    column=tok.column,
                    comment=comment,
                    justified=justified,
                    function=max(enclosing)[1] if enclosing else None,
                )
            )
        return tuple(regions)

    def _preceding_comment(self, all_idx: int, tok: Token) -> tuple[Token | None, bool]:
        """Nearest comment on the same or previous line, and whether its
        contiguous comment block contains a SAFETY comment."""
        j = all_idx - 1
        comment = None
        while j >= 0 and self._all[j].end_line >= tok.line - 1:
            if self._all[j].is_comment:
                comment = self._all[j]
                break
            j -= 1
        if comment is None:
            return None, False

        block_line = comment.line
        while j >= 0:
            cur = self._all[j]
            if not cur.is_comment or cur.end_line < block_line - 1:
                break
            if cur.is_safety_comment:
                return comment, True
            block_line = cur.line
            j -= 1
        return comment, False


def _error(message: str, tok: Token) -> ParseError:
    return ParseError(message, tok.line, tok.column, tok.start)


def _index_of(tokens: list[Token], text: str) -> int | None:
    depth = 0
    for i, t in enumerate(tokens):
        if t.kind != TokenKind.OPERATOR:
            continue
        if t.text in _OPENERS or t.text == "<":
            depth += 1
        elif t.text in _CLOSERS or t.text == ">":
            depth = max(0, depth - 1)
        elif depth == 0 and t.text == text:
            return i
    return None


def _split_top_level(tokens: list[Token]) -> list[list[Token]]:
    """Split a token list on commas outside any brackets."""
    parts: list[list[Token]] = [[]]
    depth = 0
    for t in tokens:
        if t.kind == TokenKind.OPERATOR:
            if t.text in _OPENERS or t.text == "<":
                depth += 1
            elif t.text in _CLOSERS or t.text == ">":
                depth = max(0, depth - 1)
            elif t.text == "," and depth == 0:
                parts.append([])
                continue
        parts[-1].append(t)
    return parts


def _matching_brace_end(sig: list[tuple[int, Token]], open_k: int, limit: int) -> int:
    depth = 0
    for _, t in sig[open_k:]:
        if t.is_("{"):
            depth += 1
        elif t.is_("}"):
            depth -= 1
            if depth == 0:
                return t.end
    return limit


_WORDLIKE = frozenset({TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.LITERAL})


def _normalize(tokens: list[Token]) -> str:
    """Render a token run as a whitespace-normalized type string."""
    out: list[str] = []
    prev: Token | None = None
    for t in tokens:
        if t.is_(","):
            out.append(", ")
        elif t.text in ("+", "=", "->", "=>") and t.kind == TokenKind.OPERATOR:
            out.append(f" {t.text} ")
        elif t.is_(":"):
            out.append(": ")
        else:
            if prev is not None and prev.kind in _WORDLIKE and t.kind in _WORDLIKE:
                out.append(" ")
            out.append(t.text)
        prev = t
    return "".join(out).strip()
