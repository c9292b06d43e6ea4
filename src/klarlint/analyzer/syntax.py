"""Declaration model — tagged declaration variants stored in a flat arena.

Parent and child links are indices into the arena rather than object
references, so the tree is acyclic by construction.
"""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeVar, Union

from klarlint.analyzer.lexer import Token
from klarlint.analyzer.source import Span


class PassingMode(enum.Enum):
    """How a parameter is passed, inferred from its type's leading marker."""

    OWNED = "owned"
    BORROWED = "borrowed"
    BORROWED_MUT = "borrowed-mut"

    @classmethod
    def from_type(cls, type_ref: str) -> PassingMode:
        if type_ref.startswith("&mut "):
            return cls.BORROWED_MUT
        if type_ref.startswith("&"):
            return cls.BORROWED
        return cls.OWNED


@dataclass(frozen=True)
class DocComment:
    """A contiguous block of doc comments paired with a declaration."""

    text: str
    line: int
    end_line: int


@dataclass(frozen=True)
class Parameter:
    name: str
    type_ref: str
    mode: PassingMode
    line: int
    column: int


@dataclass(frozen=True)
class Field:
    name: str
    type_ref: str
    is_public: bool
    line: int
    column: int
    span: Span


@dataclass(frozen=True)
class Variant:
    name: str
    line: int
    column: int
    span: Span


@dataclass(frozen=True)
class ModuleDecl:
    name: str
    span: Span
    line: int
    column: int
    parent: int | None = None
    is_public: bool = False
    doc: DocComment | None = None
    items: tuple[int, ...] = ()

    kind = "module"


@dataclass(frozen=True)
class StructDecl:
    name: str
    span: Span
    line: int
    column: int
    parent: int | None = None
    is_public: bool = False
    doc: DocComment | None = None
    generics: tuple[str, ...] = ()
    bounds: tuple[str, ...] = ()
    fields: tuple[Field, ...] = ()

    kind = "struct"


@dataclass(frozen=True)
class EnumDecl:
    name: str
    span: Span
    line: int
    column: int
    parent: int | None = None
    is_public: bool = False
    doc: DocComment | None = None
    generics: tuple[str, ...] = ()
    bounds: tuple[str, ...] = ()
    variants: tuple[Variant, ...] = ()

    kind = "enum"


@dataclass(frozen=True)
class TraitDecl:
    name: str
    span: Span
    line: int
    column: int
    parent: int | None = None
    is_public: bool = False
    doc: DocComment | None = None
    generics: tuple[str, ...] = ()
    bounds: tuple[str, ...] = ()
    methods: tuple[int, ...] = ()

    kind = "trait"


@dataclass(frozen=True)
class ImplDecl:
    target: str
    span: Span
    line: int
    column: int
    parent: int | None = None
    trait: str | None = None
    generics: tuple[str, ...] = ()
    bounds: tuple[str, ...] = ()
    methods: tuple[int, ...] = ()

    kind = "impl"
    is_public = False
    doc = None

    @property
    def name(self) -> str:
        if self.trait:
            return f"{self.trait} for {self.target}"
        return self.target


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    span: Span
    line: int
    column: int
    parent: int | None = None
    is_public: bool = False
    doc: DocComment | None = None
    generics: tuple[str, ...] = ()
    bounds: tuple[str, ...] = ()
    params: tuple[Parameter, ...] = ()
    receiver: str | None = None
    return_type: str | None = None
    body_span: Span | None = None
    is_unsafe: bool = False

    kind = "function"


@dataclass(frozen=True)
class ConstDecl:
    name: str
    span: Span
    line: int
    column: int
    parent: int | None = None
    is_public: bool = False
    doc: DocComment | None = None
    type_ref: str = ""
    is_static: bool = False

    kind = "const"


Declaration = Union[
    ModuleDecl, StructDecl, EnumDecl, TraitDecl, ImplDecl, FunctionDecl, ConstDecl
]

D = TypeVar("D")


@dataclass(frozen=True)
class UnsafeRegion:
    """An ``unsafe { ... }`` block and the comment that precedes it."""

    span: Span
    line: int
    column: int
    comment: Token | None
    justified: bool
    function: int | None = None


@dataclass(frozen=True)
class DeclarationArena:
    """Flat, index-addressed store of all parsed declarations."""

    declarations: tuple[Declaration, ...] = ()
    unsafe_regions: tuple[UnsafeRegion, ...] = ()

    def __len__(self) -> int:
        return len(self.declarations)

    def __getitem__(self, index: int) -> Declaration:
        return self.declarations[index]

    def __iter__(self) -> Iterator[Declaration]:
        return iter(self.declarations)

    def of_type(self, cls: type[D]) -> list[tuple[int, D]]:
        """All ``(index, declaration)`` pairs of the given variant."""
        return [
            (i, d) for i, d in enumerate(self.declarations) if isinstance(d, cls)
        ]

    def parent_of(self, index: int) -> Declaration | None:
        parent = self.declarations[index].parent
        return None if parent is None else self.declarations[parent]

    def children(self, index: int | None) -> list[int]:
        """Indices of direct children; ``None`` selects top-level items."""
        return [i for i, d in enumerate(self.declarations) if d.parent == index]

    def public(self) -> list[Declaration]:
        return [d for d in self.declarations if d.is_public]

    def enclosing_function(self, offset: int) -> tuple[int, FunctionDecl] | None:
        """The function whose body contains ``offset``, innermost first."""
        best: tuple[int, FunctionDecl] | None = None
        for i, decl in self.of_type(FunctionDecl):
            if decl.body_span is not None and offset in decl.body_span:
                if best is None or decl.body_span.start > best[1].body_span.start:
                    best = (i, decl)
        return best
