"""Runs the enabled rules over one parsed file."""

from __future__ import annotations

import logging
from pathlib import Path

from klarlint.analyzer.lexer import TokenStream, tokenize
from klarlint.analyzer.models import (
    IO_ERROR,
    PARSE_ERROR,
    FileResult,
    FileStatus,
    Finding,
    Severity,
)
from klarlint.analyzer.parser import ParseIssue, parse
from klarlint.analyzer.rules.base import Rule
from klarlint.analyzer.rules.docs import doc_counts
from klarlint.analyzer.source import SourceFile
from klarlint.analyzer.syntax import DeclarationArena

logger = logging.getLogger(__name__)


def run_rules(
    rules: tuple[Rule, ...],
    arena: DeclarationArena,
    tokens: TokenStream,
    source: SourceFile,
) -> list[Finding]:
    """Run every rule, isolating failures.

    A rule that raises contributes a single diagnostic finding tagged with
    its id instead of its regular findings; the remaining rules still run.
    """
    findings: list[Finding] = []
    for rule in rules:
        try:
            produced = list(rule.check(arena, tokens, source))
        except Exception as e:
            logger.warning("Rule %s failed on %s: %s", rule.rule_id, source.path, e)
            logger.debug("Traceback for rule %s", rule.rule_id, exc_info=True)
            findings.append(
                Finding(
                    rule=rule.rule_id,
                    severity=Severity.MEDIUM,
                    file=source.path,
                    line=1,
                    column=1,
                    message=f"rule execution error: {type(e).__name__}: {e}",
                )
            )
            continue
        findings.extend(produced)
    return findings


def analyze_source(path: str, text: str, rules: tuple[Rule, ...]) -> FileResult:
    """Lex, parse and check one file's text."""
    source = SourceFile.from_text(path, text)
    tokens = tokenize(text)
    parsed = parse(tokens)

    findings = [_parse_finding(path, issue) for issue in parsed.errors]
    findings.extend(run_rules(rules, parsed.arena, tokens, source))
    public, documented = doc_counts(parsed.arena)

    if parsed.errors:
        status = FileStatus.PARTIAL
        detail = "; ".join(_resync_text(issue) for issue in parsed.errors)
    else:
        status = FileStatus.ANALYZED
        detail = ""

    return FileResult(
        path=path,
        findings=tuple(findings),
        status=status,
        detail=detail,
        public_declarations=public,
        documented_declarations=documented,
    )


def analyze_path(path: Path, display_path: str, rules: tuple[Rule, ...]) -> FileResult:
    """Read and analyze one file; unreadable files become an io-error finding."""
    try:
        data = path.read_bytes()
    except OSError as e:
        reason = e.strerror or str(e)
        logger.debug("Skipping %s: %s", path, reason)
        return FileResult(
            path=display_path,
            findings=(
                Finding(
                    rule=IO_ERROR,
                    severity=Severity.HIGH,
                    file=display_path,
                    line=1,
                    column=1,
                    message=f"cannot read file: {reason}",
                ),
            ),
            status=FileStatus.SKIPPED,
            detail=reason,
        )
    return analyze_source(display_path, data.decode("utf-8", errors="replace"), rules)


def _parse_finding(path: str, issue: ParseIssue) -> Finding:
    return Finding(
        rule=PARSE_ERROR,
        severity=Severity.HIGH,
        file=path,
        line=issue.line,
        column=issue.column,
        message=f"{issue.message}; {_resync_text(issue)}",
    )


def _resync_text(issue: ParseIssue) -> str:
    if issue.resync_line is None:
        return "skipped to end of file"
    return f"resynchronized at line {issue.resync_line}"
