"""Run orchestrator — discovers files and analyzes them on a worker pool."""

from __future__ import annotations

import fnmatch
import logging
import os
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from klarlint.analyzer.aggregator import aggregate
from klarlint.analyzer.engine import analyze_path
from klarlint.analyzer.models import AnalysisReport, FileResult
from klarlint.analyzer.rules import BUILTIN_RULES, Rule
from klarlint.errors import InvocationError
from klarlint.ruleset.models import RuleSetConfig

logger = logging.getLogger(__name__)

# Directories to always skip
_SKIP_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".zig-cache",
    "zig-cache",
    "zig-out",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    "target",
}


def default_workers() -> int:
    return min(8, os.cpu_count() or 1)


class Analyzer:
    """Orchestrates analysis of a set of paths under one rule configuration."""

    def __init__(
        self,
        config: RuleSetConfig | None = None,
        max_workers: int | None = None,
        rules: tuple[Rule, ...] = BUILTIN_RULES,
    ) -> None:
        self._config = config or RuleSetConfig()
        self._rules = self._config.enabled_rules(rules)
        self._max_workers = max(1, max_workers or default_workers())

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def run(self, paths: Iterable[str | Path]) -> AnalysisReport:
        """Analyze every discovered file and return the aggregated report.

        Either a complete report is returned or an exception propagates;
        results are never partially merged.
        """
        start = time.time()
        files = self.discover(paths)
        results = self._analyze_all(files)
        report = aggregate(results)
        logger.info(
            "Analyzed %d file(s) with %d rule(s) in %.2fs: %s",
            len(files),
            len(self._rules),
            time.time() - start,
            report.status.value,
        )
        return report

    def discover(self, paths: Iterable[str | Path]) -> list[tuple[Path, str]]:
        """Resolve input paths to ``(path, display path)`` pairs."""
        found: dict[str, Path] = {}
        for raw in paths:
            path = Path(raw)
            if not path.exists():
                raise InvocationError(f"Path does not exist: {raw}")
            if path.is_file():
                found.setdefault(str(path), path)
                continue
            for file_path in self._walk(path):
                found.setdefault(str(file_path), file_path)
        return [(p, display) for display, p in sorted(found.items())]

    def _walk(self, directory: Path):
        """Walk directory yielding files with an analyzable extension."""
        extensions = set(self._config.extensions)
        for root, dirs, files in os.walk(directory):
            rel_root = Path(root).relative_to(directory)
            # Prune skipped directories in-place
            dirs[:] = [
                d
                for d in dirs
                if d not in _SKIP_DIRS and not self._excluded(rel_root / d)
            ]
            for name in files:
                path = Path(root) / name
                if path.suffix not in extensions:
                    continue
                if self._excluded(rel_root / name):
                    continue
                yield path

    def _excluded(self, rel_path: Path) -> bool:
        posix = rel_path.as_posix()
        return any(
            fnmatch.fnmatch(posix, pattern) or fnmatch.fnmatch(rel_path.name, pattern)
            for pattern in self._config.exclude
        )

    def _analyze_all(self, files: list[tuple[Path, str]]) -> list[FileResult]:
        if not files:
            return []
        workers = min(self._max_workers, len(files))
        executor = ThreadPoolExecutor(max_workers=workers)
        try:
            futures = [
                executor.submit(analyze_path, path, display, self._rules)
                for path, display in files
            ]
            results = [future.result() for future in as_completed(futures)]
        except BaseException:
            # Interrupted: drop queued work and emit nothing
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)
        return results
