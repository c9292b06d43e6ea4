"""Rule-set configuration models — immutable, passed explicitly to the analyzer."""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass

from klarlint.analyzer.models import Severity
from klarlint.analyzer.rules import BUILTIN_RULES, Rule


class RuleSelector(enum.Enum):
    """Which family of rules a run enables by default."""

    FULL = "full"
    SECURITY = "security"

    @classmethod
    def parse(cls, value: str) -> RuleSelector:
        if value == "security-only":
            return cls.SECURITY
        return cls(value)


DEFAULT_EXTENSIONS = (".kl",)


@dataclass(frozen=True)
class RuleSetConfig:
    """A complete rule configuration.

    ``toggles`` are explicit per-rule overrides and win over the selector.
    """

    rule_set: RuleSelector = RuleSelector.FULL
    toggles: tuple[tuple[str, bool], ...] = ()
    severity_min: Severity = Severity.HIGH
    exclude: tuple[str, ...] = ()
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS

    def is_enabled(self, rule: Rule) -> bool:
        explicit = dict(self.toggles).get(rule.rule_id)
        if explicit is not None:
            return explicit
        return self.rule_set == RuleSelector.FULL or rule.security

    def enabled_rules(
        self, rules: tuple[Rule, ...] = BUILTIN_RULES
    ) -> tuple[Rule, ...]:
        return tuple(r for r in rules if self.is_enabled(r))

    def replace(self, **changes: object) -> RuleSetConfig:
        return dataclasses.replace(self, **changes)
