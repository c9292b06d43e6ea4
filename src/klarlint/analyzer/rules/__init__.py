"""Built-in rules, registered by identifier."""

from __future__ import annotations

from klarlint.analyzer.rules import api, docs, errors, naming, ownership, secrets, unsafe
from klarlint.analyzer.rules.base import Rule

BUILTIN_RULES: tuple[Rule, ...] = (
    *naming.RULES,
    *ownership.RULES,
    *api.RULES,
    *errors.RULES,
    *unsafe.RULES,
    *secrets.RULES,
    *docs.RULES,
)

RULES_BY_ID: dict[str, Rule] = {r.rule_id: r for r in BUILTIN_RULES}

__all__ = ["BUILTIN_RULES", "RULES_BY_ID", "Rule"]
