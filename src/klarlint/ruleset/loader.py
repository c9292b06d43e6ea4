"""Load RuleSetConfig objects from YAML files."""

from __future__ import annotations

from pathlib import Path

import yaml

from klarlint.analyzer.models import Severity
from klarlint.analyzer.rules import RULES_BY_ID
from klarlint.errors import ConfigError
from klarlint.ruleset.models import DEFAULT_EXTENSIONS, RuleSelector, RuleSetConfig


def load_ruleset(path: str | Path) -> RuleSetConfig:
    """Load a rule configuration from a YAML file path."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read rule configuration {path}: {e}") from e
    return load_ruleset_from_string(text)


def load_ruleset_from_string(text: str) -> RuleSetConfig:
    """Parse a YAML string into a RuleSetConfig."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid rule configuration YAML: {e}") from e
    if data is None:
        return RuleSetConfig()
    if not isinstance(data, dict):
        raise ConfigError("Rule configuration YAML must be a mapping")
    return _build_ruleset(data)


def _build_ruleset(data: dict) -> RuleSetConfig:
    try:
        rule_set = RuleSelector.parse(str(data.get("rule_set", "full")))
    except ValueError as e:
        raise ConfigError(f"Unknown rule_set: {data.get('rule_set')!r}") from e

    try:
        severity_min = Severity(str(data.get("severity_min", "high")))
    except ValueError as e:
        raise ConfigError(
            f"Unknown severity_min: {data.get('severity_min')!r}"
        ) from e

    return RuleSetConfig(
        rule_set=rule_set,
        toggles=_parse_toggles(data.get("rules", {})),
        severity_min=severity_min,
        exclude=_string_list(data.get("exclude", []), "exclude"),
        extensions=_parse_extensions(data.get("extensions", DEFAULT_EXTENSIONS)),
    )


def _parse_toggles(rules_data: object) -> tuple[tuple[str, bool], ...]:
    if not isinstance(rules_data, dict):
        raise ConfigError("'rules' must map rule ids to true/false")
    toggles: list[tuple[str, bool]] = []
    for rule_id, enabled in rules_data.items():
        if rule_id not in RULES_BY_ID:
            raise ConfigError(f"Unknown rule id in configuration: {rule_id!r}")
        if not isinstance(enabled, bool):
            raise ConfigError(f"Rule toggle for {rule_id!r} must be true or false")
        toggles.append((rule_id, enabled))
    return tuple(sorted(toggles))


def _parse_extensions(raw: object) -> tuple[str, ...]:
    exts = _string_list(raw, "extensions")
    return tuple(e if e.startswith(".") else f".{e}" for e in exts)


def _string_list(raw: object, key: str) -> tuple[str, ...]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        raise ConfigError(f"'{key}' must be a list of strings")
    return tuple(str(item) for item in raw)
