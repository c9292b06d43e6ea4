"""CLI entry point — Click group with global options."""

from __future__ import annotations

import logging

import click

from klarlint import __version__
from klarlint.config import KlarlintConfig
from klarlint.errors import ConfigError
from klarlint.ruleset.loader import load_ruleset
from klarlint.ruleset.models import RuleSetConfig


@click.group()
@click.version_option(version=__version__, prog_name="klarlint")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a YAML rule configuration file.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """klarlint: standards and security review for Klar source code."""
    ctx.ensure_object(dict)

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        app_config = KlarlintConfig.load()
        rules_file = config or app_config.rules_file
        ruleset = load_ruleset(rules_file) if rules_file else RuleSetConfig()
    except ConfigError as e:
        raise click.UsageError(str(e), ctx) from e

    app_config.verbose = verbose
    ctx.obj["config"] = app_config
    ctx.obj["ruleset"] = ruleset


def _register_commands() -> None:
    from klarlint.cli.analyze import analyze  # noqa: F811
    from klarlint.cli.rules import rules  # noqa: F811

    main.add_command(analyze)
    main.add_command(rules)


_register_commands()
