"""
Error model for vc_changelog.

Every failure the tool can report belongs to a closed set of kinds
described by :class:`ErrorKind`. Components raise :class:`ClogError`
carrying one of those kinds; only the command line entry point calls
:meth:`ClogError.report_and_exit`, which prints the message and ends
the process with the exit status matching the kind's fatality.
"""

from __future__ import annotations

import enum
from typing import NoReturn, Optional

import click


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


class ErrorKind(enum.Enum):
    """Closed enumeration of failure kinds."""

    CONFIG_PARSE = "ConfigParseErr"
    CONFIG_FORMAT = "ConfigFormatErr"
    CURRENT_DIR = "CurrentDirErr"
    TOML_READ = "TomlReadErr"
    LINK_STYLE = "LinkStyleErr"
    SEMVER = "SemVerErr"
    CREATE_FILE = "CreateFileErr"
    WRITE = "WriteErr"
    IO = "IoErr"
    UNKNOWN = "UnknownErr"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    def is_fatal(self) -> bool:
        """Return True if a run hitting this kind of failure cannot continue."""
        return self not in NON_FATAL_KINDS


_DESCRIPTIONS = {
    ErrorKind.CONFIG_PARSE: "error parsing config file",
    ErrorKind.CONFIG_FORMAT: "incorrect format for config file",
    ErrorKind.CURRENT_DIR: "cannot get current directory",
    ErrorKind.TOML_READ: "cannot read TOML config file",
    ErrorKind.LINK_STYLE: "unrecognized link-style field",
    ErrorKind.SEMVER: "cannot parse semantic version from tag",
    ErrorKind.CREATE_FILE: "cannot create output file",
    ErrorKind.WRITE: "cannot write to output file or stream",
    ErrorKind.IO: "fatal i/o error with output file",
    ErrorKind.UNKNOWN: "unknown fatal error",
}

# Kinds with a safe fallback. Kept as a module constant so the partition
# can be changed in one place.
NON_FATAL_KINDS = frozenset({ErrorKind.LINK_STYLE, ErrorKind.SEMVER})


class ClogError(Exception):
    """Raised by any component when an operation fails.

    Parameters
    ----------
    kind : ErrorKind
        The classified failure kind.
    detail : str, optional
        Extra context supplied at the raise site (a path, the offending
        value, the underlying OS error, ...).
    """

    def __init__(self, kind: ErrorKind, detail: Optional[str] = None) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        if self.detail:
            return f"{self.kind.description}: {self.detail}"
        return self.kind.description

    def is_fatal(self) -> bool:
        return self.kind.is_fatal()

    def report_and_exit(self) -> NoReturn:
        """Print this error and terminate the process.

        Fatal errors go to standard error with exit status 1. Non-fatal
        errors go to standard output with exit status 0.
        """
        if self.is_fatal():
            click.echo(f"error: {self.message}", err=True)
            raise SystemExit(EXIT_FAILURE)
        click.echo(self.message)
        raise SystemExit(EXIT_SUCCESS)
