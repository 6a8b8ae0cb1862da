"""Standardized exit codes and the exceptions that carry them.

Every ``codemap`` command exits with one of these codes:

    0  success
    1  unexpected error
    2  usage error (bad arguments, unknown command)
    3  index missing (run ``codemap index`` first)
    4  partial result (some inputs could not be read)
"""

from __future__ import annotations

import click

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_INDEX_MISSING = 3
EXIT_PARTIAL = 4

DESCRIPTIONS = {
    EXIT_SUCCESS: "success",
    EXIT_ERROR: "unexpected error",
    EXIT_USAGE: "usage error",
    EXIT_INDEX_MISSING: "index missing, run `codemap index`",
    EXIT_PARTIAL: "partial result, some files could not be read",
}


def exit_with(code: int, message: str | None = None):
    """Print *message* to stderr (if given) and exit with *code*."""
    if message:
        click.echo(message, err=True)
    raise SystemExit(code)


class CodemapError(click.ClickException):
    """Base error for codemap; Click prints the message and exits with ``exit_code``."""

    exit_code = EXIT_ERROR

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class IndexMissingError(CodemapError):
    exit_code = EXIT_INDEX_MISSING

    def __init__(self, message: str | None = None):
        super().__init__(message or "No index found. Run `codemap index` first.")


class SourceReadError(CodemapError):
    """A source file could not be read from disk."""

    def __init__(self, path: str, reason: str | None = None):
        self.path = path
        self.reason = reason
        msg = f"Cannot read {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PartialResultError(CodemapError):
    exit_code = EXIT_PARTIAL

    def __init__(self, failed: list[str] | None = None, message: str | None = None):
        self.failed = list(failed or [])
        if message is None:
            message = f"{len(self.failed)} file(s) could not be read"
        super().__init__(message)
