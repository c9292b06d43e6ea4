"""Long parameter lists and kitchen-sink traits."""

from __future__ import annotations

from collections.abc import Iterator

from klarlint.analyzer.lexer import TokenStream
from klarlint.analyzer.models import Finding, Severity
from klarlint.analyzer.rules.base import Rule
from klarlint.analyzer.rules.naming import PASCAL_CASE, rewrite, split_words
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena, FunctionDecl, TraitDecl

MAX_PARAMETERS = 4
MAX_TRAIT_METHODS = 3


def check_parameter_count(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for _, fn in arena.of_type(FunctionDecl):
        if len(fn.params) <= MAX_PARAMETERS:
            continue
        config_name = rewrite(fn.name, PASCAL_CASE) + "Config"
        lines = [f"struct {config_name} {{"]
        lines.extend(f"    {p.name}: {p.type_ref}," for p in fn.params)
        lines.append("}")
        yield PARAMETER_COUNT.finding(
            source,
            fn.line,
            fn.column,
            f"function '{fn.name}' takes {len(fn.params)} parameters "
            f"(more than {MAX_PARAMETERS}); group them into a configuration "
            f"struct '{config_name}'",
            suggested_fix="\n".join(lines),
        )


def check_trait_cohesion(
    arena: DeclarationArena, tokens: TokenStream, source: SourceFile
) -> Iterator[Finding]:
    for _, trait in arena.of_type(TraitDecl):
        if len(trait.methods) <= MAX_TRAIT_METHODS:
            continue
        names = [arena[i].name for i in trait.methods]
        word_sets = [{w.lower() for w in split_words(n)} for n in names]
        shared = set.intersection(*word_sets)
        if shared:
            continue
        verbs = sorted({split_words(n)[0].lower() for n in names if split_words(n)})
        yield TRAIT_COHESION.finding(
            source,
            trait.line,
            trait.column,
            f"trait '{trait.name}' has {len(names)} methods with unrelated "
            f"verbs ({', '.join(verbs)}); consider splitting it into "
            "smaller traits",
        )


PARAMETER_COUNT = Rule(
    rule_id="api.parameter-count",
    family="api",
    severity=Severity.SUGGESTION,
    description=f"Functions take at most {MAX_PARAMETERS} parameters.",
    check=check_parameter_count,
)

TRAIT_COHESION = Rule(
    rule_id="api.trait-cohesion",
    family="api",
    severity=Severity.SUGGESTION,
    description="Large traits share a common verb or domain word.",
    check=check_trait_cohesion,
)

RULES = (PARAMETER_COUNT, TRAIT_COHESION)
