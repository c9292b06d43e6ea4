"""Global configuration — XDG paths, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from klarlint.errors import ConfigError

PROJECT_CONFIG_NAME = ".klarlint.yaml"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "klarlint"
    return Path.home() / ".config" / "klarlint"


@dataclass
class KlarlintConfig:
    """Application-wide configuration."""

    config_dir: Path = field(default_factory=_default_config_dir)
    rules_file: Path | None = None
    max_workers: int | None = None
    verbose: bool = False

    @classmethod
    def load(cls, cwd: Path | None = None) -> KlarlintConfig:
        """Load config from environment variables with XDG defaults.

        The rule configuration file is looked up in order: ``KLARLINT_CONFIG``,
        ``.klarlint.yaml`` in the working directory, then ``config.yaml`` in
        the XDG config directory.
        """
        config = cls()

        env_workers = os.environ.get("KLARLINT_WORKERS")
        if env_workers:
            try:
                config.max_workers = int(env_workers)
            except ValueError as e:
                raise ConfigError(
                    f"KLARLINT_WORKERS must be an integer, got {env_workers!r}"
                ) from e

        env_config = os.environ.get("KLARLINT_CONFIG")
        project_config = (cwd or Path.cwd()) / PROJECT_CONFIG_NAME
        user_config = config.config_dir / "config.yaml"
        if env_config:
            config.rules_file = Path(env_config)
        elif project_config.is_file():
            config.rules_file = project_config
        elif user_config.is_file():
            config.rules_file = user_config

        return config
