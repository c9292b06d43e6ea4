"""CLI command: klarlint analyze <path>... — standards and security review."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from klarlint.analyzer.models import AnalysisReport, Severity
from klarlint.analyzer.orchestrator import Analyzer
from klarlint.analyzer.report import render_json, render_text
from klarlint.errors import InvocationError
from klarlint.ruleset.models import RuleSelector, RuleSetConfig

console = Console(stderr=True)

EXIT_FINDINGS = 1
EXIT_INTERRUPTED = 130


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path())
@click.option(
    "--rules",
    "rule_set",
    type=click.Choice(["full", "security", "security-only"]),
    default=None,
    help="Rule set to run (default: full, or the configuration file's value).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option(
    "--severity-min",
    type=click.Choice([s.value for s in Severity]),
    default=None,
    help="Exit with status 1 when findings at or above this level exist "
    "(default: high).",
)
@click.option(
    "--exclude",
    "-e",
    multiple=True,
    help="Glob patterns to exclude (repeatable, comma-separated).",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Number of files analyzed in parallel.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the report to a file instead of stdout.",
)
@click.pass_context
def analyze(
    ctx: click.Context,
    paths: tuple[str, ...],
    rule_set: str | None,
    output_format: str,
    severity_min: str | None,
    exclude: tuple[str, ...],
    jobs: int | None,
    output: str | None,
) -> None:
    """Review Klar source files against coding standards."""
    ruleset = _apply_overrides(
        ctx.obj.get("ruleset") or RuleSetConfig(), rule_set, severity_min, exclude
    )
    app_config = ctx.obj.get("config")
    workers = jobs or (app_config.max_workers if app_config else None)

    if output_format == "text" and output is None:
        console.print(
            f"[bold]klarlint[/bold] reviewing [cyan]{escape(', '.join(paths))}[/cyan] "
            f"with rule set [cyan]{ruleset.rule_set.value}[/cyan]\n"
        )

    analyzer = Analyzer(ruleset, max_workers=workers)
    try:
        report = analyzer.run(paths)
    except InvocationError as e:
        raise click.UsageError(str(e), ctx) from e
    except KeyboardInterrupt:
        console.print("\n[red]Interrupted; no report produced.[/red]")
        ctx.exit(EXIT_INTERRUPTED)

    _emit(ctx, report, output_format, output)

    if report.findings_at_least(ruleset.severity_min):
        ctx.exit(EXIT_FINDINGS)


def _apply_overrides(
    ruleset: RuleSetConfig,
    rule_set: str | None,
    severity_min: str | None,
    exclude: tuple[str, ...],
) -> RuleSetConfig:
    changes: dict[str, object] = {}
    if rule_set is not None:
        changes["rule_set"] = RuleSelector.parse(rule_set)
    if severity_min is not None:
        changes["severity_min"] = Severity(severity_min)
    patterns = tuple(p.strip() for value in exclude for p in value.split(",") if p.strip())
    if patterns:
        changes["exclude"] = ruleset.exclude + patterns
    return ruleset.replace(**changes) if changes else ruleset


def _emit(
    ctx: click.Context, report: AnalysisReport, output_format: str, output: str | None
) -> None:
    if output is None:
        if output_format == "json":
            click.echo(render_json(report), nl=False)
        else:
            render_text(report, Console())
        return

    try:
        with open(output, "w", encoding="utf-8") as fh:
            if output_format == "json":
                fh.write(render_json(report))
            else:
                render_text(report, Console(file=fh, width=120))
    except OSError as e:
        raise click.UsageError(
            f"Cannot write report to {output}: {e.strerror or e}", ctx
        ) from e
