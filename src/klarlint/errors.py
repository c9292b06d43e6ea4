"""Exception hierarchy. Only invocation errors are allowed to end a run."""

from __future__ import annotations


class KlarlintError(Exception):
    """Base class for all klarlint errors."""


class InvocationError(KlarlintError):
    """Bad arguments or a nonexistent input path. Fatal, exit code 2."""


class ConfigError(InvocationError):
    """The rule configuration file is malformed."""


class ParseError(KlarlintError):
    """Malformed syntax inside one declaration.

    Raised inside the parser and recovered there; callers only ever see the
    resulting ``ParseIssue`` records.
    """

    def __init__(self, message: str, line: int, column: int, offset: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.offset = offset
