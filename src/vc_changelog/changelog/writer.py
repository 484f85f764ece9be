"""
Writing rendered changelogs to their destination.

New content is always prepended to the old content: the result is the
rendered text followed by whatever the input file held. File
destinations are replaced atomically through a temporary file in the
same directory, so a failed write never leaves a truncated changelog in
place of the previous one.
"""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO, Union

import click

from vc_changelog.error import ClogError, ErrorKind


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


PathLike = Union[str, Path]


@dataclass(frozen=True)
class FileRoles:
    """Where old changelog content is read from and new content written to.

    ``outfile`` and ``infile`` both ``None`` means standard output only.
    The same path in both roles is a combined changelog file.
    """

    outfile: Optional[Path] = None
    infile: Optional[Path] = None

    @classmethod
    def stdout(cls) -> "FileRoles":
        return cls()

    @classmethod
    def combined(cls, path: PathLike) -> "FileRoles":
        return cls(outfile=Path(path), infile=Path(path))

    @classmethod
    def separate(cls, outfile: PathLike, infile: PathLike) -> "FileRoles":
        return cls(outfile=Path(outfile), infile=Path(infile))

    @classmethod
    def from_paths(
        cls,
        changelog: Optional[PathLike] = None,
        outfile: Optional[PathLike] = None,
        infile: Optional[PathLike] = None,
    ) -> "FileRoles":
        """Build roles from configuration values; ``changelog`` wins."""
        if changelog:
            return cls.combined(changelog)
        return cls(
            outfile=Path(outfile) if outfile else None,
            infile=Path(infile) if infile else None,
        )

    @property
    def source(self) -> Optional[Path]:
        """The file holding the old content, if any."""
        return self.infile or self.outfile


def read_old_content(path: Optional[Path]) -> str:
    """Return the content of ``path``; a missing file reads as empty."""
    if path is None:
        return ""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No existing changelog at %s", path)
        return ""
    except (OSError, UnicodeDecodeError) as exc:
        raise ClogError(ErrorKind.IO, f"cannot read {path}: {exc}") from exc


def _default_file_mode() -> int:
    """Mode a plain ``open()`` would give a new file under the current umask."""
    mask = os.umask(0)
    os.umask(mask)
    return 0o666 & ~mask


def _replace_file(path: Path, content: str) -> None:
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
    except OSError as exc:
        raise ClogError(ErrorKind.CREATE_FILE, f"{path}: {exc}") from exc

    tmp_path = Path(handle.name)
    try:
        try:
            with handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as exc:
            raise ClogError(ErrorKind.WRITE, f"{path}: {exc}") from exc
        try:
            if path.exists():
                os.chmod(tmp_path, path.stat().st_mode & 0o777)
            else:
                os.chmod(tmp_path, _default_file_mode())
            os.replace(tmp_path, path)
        except OSError as exc:
            raise ClogError(ErrorKind.IO, f"cannot replace {path}: {exc}") from exc
    except ClogError:
        tmp_path.unlink(missing_ok=True)
        raise


def write(rendered_text: str, roles: FileRoles, stream: Optional[TextIO] = None) -> None:
    """Combine ``rendered_text`` with the old content and write it out.

    Parameters
    ----------
    rendered_text : str
        Output of :func:`vc_changelog.changelog.renderer.render`.
    roles : FileRoles
        Destination and source of old content.
    stream : TextIO, optional
        Stream used when no output file is configured. Defaults to
        standard output.

    Raises
    ------
    ClogError
        ``CREATE_FILE``, ``WRITE`` or ``IO`` when the destination cannot be
        read, created, written or replaced.
    """
    old_content = read_old_content(roles.source)
    content = rendered_text + old_content

    if roles.outfile is None:
        try:
            click.echo(content, file=stream or sys.stdout, nl=False)
        except OSError as exc:
            raise ClogError(ErrorKind.WRITE, f"standard output: {exc}") from exc
        return

    logger.debug("Writing changelog to %s (old content from %s)", roles.outfile, roles.source)
    _replace_file(roles.outfile, content)
