"""Tests for application configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from klarlint.config import PROJECT_CONFIG_NAME, KlarlintConfig
from klarlint.errors import ConfigError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("KLARLINT_CONFIG", raising=False)
    monkeypatch.delenv("KLARLINT_WORKERS", raising=False)


def test_defaults(tmp_path: Path):
    config = KlarlintConfig.load(cwd=tmp_path)
    assert config.config_dir == tmp_path / "xdg" / "klarlint"
    assert config.rules_file is None
    assert config.max_workers is None


def test_workers_from_env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("KLARLINT_WORKERS", "3")
    assert KlarlintConfig.load(cwd=tmp_path).max_workers == 3


def test_bad_workers_value(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("KLARLINT_WORKERS", "many")
    with pytest.raises(ConfigError, match="KLARLINT_WORKERS"):
        KlarlintConfig.load(cwd=tmp_path)


def test_rules_file_lookup_order(monkeypatch, tmp_path: Path):
    user_config = tmp_path / "xdg" / "klarlint" / "config.yaml"
    user_config.parent.mkdir(parents=True)
    user_config.write_text("rule_set: full\n")
    assert KlarlintConfig.load(cwd=tmp_path).rules_file == user_config

    project_config = tmp_path / PROJECT_CONFIG_NAME
    project_config.write_text("rule_set: security\n")
    assert KlarlintConfig.load(cwd=tmp_path).rules_file == project_config

    monkeypatch.setenv("KLARLINT_CONFIG", "/etc/klarlint.yaml")
    assert KlarlintConfig.load(cwd=tmp_path).rules_file == Path("/etc/klarlint.yaml")
