"""Ownership rules — stored references and unjustified shared ownership."""

from __future__ import annotations

import re
from collections.abc import Iterator

from klarlint.analyzer.lexer import Token, TokenKind, TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.rules.base import Rule, call_args
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena, StructDecl

_SHARED = re.compile(r"^(Rc|Arc)\s*[\[<](.+)[\]>]$")

# Interior-mutability wrappers are not the shared type itself
_WRAPPERS = frozenset({"RefCell", "Cell", "Mutex", "RwLock", "Box"})


def check_stored_reference(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for _, struct in arena.of_type(StructDecl):
        for f in struct.fields:
            if not f.type_ref.startswith("&"):
                continue
            owned = f.type_ref.lstrip("&").removeprefix("mut ").strip()
            yield STORED_REFERENCE.finding(
                source,
                f.line,
                f.column,
                f"field '{struct.name}.{f.name}' stores a reference "
                f"('{f.type_ref}'); stored references are forbidden, "
                "the struct must own its data",
                suggested_fix=f"{f.name}: {owned}",
            )


def check_shared_ownership(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    significant = tokens.significant()
    for _, struct in arena.of_type(StructDecl):
        for f in struct.fields:
            m = _SHARED.match(f.type_ref)
            if not m:
                continue
            wrapper, inner = m.group(1), m.group(2)
            names = {
                n for n in re.findall(r"[A-Za-z_][A-Za-z0-9_]*", inner)
            } - _WRAPPERS
            sites = sharing_sites(significant, wrapper, names)
            if sites >= 2:
                yield SHARED_OWNERSHIP.finding(
                    source,
                    f.line,
                    f.column,
                    f"field '{struct.name}.{f.name}' uses shared ownership "
                    f"('{f.type_ref}'); confirm that multiple owners are required",
                )
            else:
                yield SHARED_OWNERSHIP.finding(
                    source,
                    f.line,
                    f.column,
                    f"field '{struct.name}.{f.name}' uses shared ownership "
                    f"('{f.type_ref}') without evidence of multiple owners "
                    f"({sites} construction site(s) in this file)",
                    suggested_fix=f"{f.name}: {inner}",
                    severity=Severity.MEDIUM,
                )


def sharing_sites(tokens: list[Token], wrapper: str, names: set[str]) -> int:
    """Count ``Rc::new(T..)``/``Rc.from(T..)`` sites plus any ``Rc::clone``."""
    count = 0
    for i in range(len(tokens) - 3):
        tok = tokens[i]
        if tok.kind != TokenKind.IDENTIFIER or tok.text != wrapper:
            continue
        sep, method, paren = tokens[i + 1], tokens[i + 2], tokens[i + 3]
        if not (sep.is_("::") or sep.is_(".")) or not paren.is_("("):
            continue
        if method.text == "clone":
            count += 1
        elif method.text in ("new", "from"):
            args, _ = call_args(tokens, i + 3)
            if any(a.text in names for a in args):
                count += 1
    return count


STORED_REFERENCE = Rule(
    rule_id="ownership.stored-reference",
    family="ownership",
    severity=Severity.CRITICAL,
    description="Struct fields never store bare references.",
    check=check_stored_reference,
    security=True,
)

SHARED_OWNERSHIP = Rule(
    rule_id="ownership.shared-ownership",
    family="ownership",
    severity=Severity.SUGGESTION,
    description="Rc/Arc fields are backed by evidence of multiple owners.",
    check=check_shared_ownership,
)

RULES = (STORED_REFERENCE, SHARED_OWNERSHIP)
