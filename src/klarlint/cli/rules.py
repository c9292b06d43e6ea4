"""CLI command: klarlint rules — list the registered rules."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from klarlint.analyzer.report import SEVERITY_COLORS
from klarlint.analyzer.rules import BUILTIN_RULES
from klarlint.ruleset.models import RuleSelector, RuleSetConfig


@click.command()
@click.option(
    "--rules",
    "rule_set",
    type=click.Choice(["full", "security", "security-only"]),
    default=None,
    help="Show which rules this rule set enables.",
)
@click.pass_context
def rules(ctx: click.Context, rule_set: str | None) -> None:
    """List the available rules and whether they are enabled."""
    ruleset = ctx.obj.get("ruleset") or RuleSetConfig()
    if rule_set is not None:
        ruleset = ruleset.replace(rule_set=RuleSelector.parse(rule_set))

    table = Table(title=f"Rules ({ruleset.rule_set.value})")
    table.add_column("Rule", style="magenta", no_wrap=True)
    table.add_column("Family")
    table.add_column("Severity")
    table.add_column("Security", justify="center")
    table.add_column("Enabled", justify="center")
    table.add_column("Description")

    for rule in BUILTIN_RULES:
        color = SEVERITY_COLORS[rule.severity]
        table.add_row(
            rule.rule_id,
            rule.family,
            f"[{color}]{rule.severity.value}[/{color}]",
            "yes" if rule.security else "",
            "[green]yes[/green]" if ruleset.is_enabled(rule) else "[dim]no[/dim]",
            rule.description,
        )

    Console().print(table)
