"""
Data models for parsed commits.

:class:`RawCommit` is one record as read from the version control log.
:class:`CommitEntry` is the classified form produced by
:mod:`vc_changelog.parsing.commit_parser`; it is immutable once built.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


SHORT_HASH_LENGTH = 8


@dataclass(frozen=True)
class RawCommit:
    """A commit hash and its full message (subject, blank line, body)."""

    hash: str
    message: str

    @property
    def subject(self) -> str:
        lines = self.message.splitlines()
        return lines[0] if lines else ""

    @property
    def body(self) -> str:
        lines = self.message.splitlines()
        return "\n".join(lines[1:])


@dataclass(frozen=True)
class CommitEntry:
    """Representation of one conventional commit.

    Attributes
    ----------
    hash : str
        Full or abbreviated commit hash.
    raw_type : str
        The type token exactly as written (``feat``, ``fix``, ...).
    component : str
        The scope token, or an empty string when the commit has none.
    subject : str
        The description following ``type(component): ``.
    closes : Tuple[int, ...]
        Issue numbers referenced by closing keywords in the body, in order
        of first appearance and without duplicates.
    breaking : str, optional
        Description of a breaking change, ``None`` if the commit is not
        breaking.
    breaks : Tuple[int, ...]
        Issue numbers referenced by ``breaks #N`` or ``broke #N`` in the
        body, in order of first appearance and without duplicates.
    """

    hash: str
    raw_type: str
    component: str
    subject: str
    closes: Tuple[int, ...] = ()
    breaking: Optional[str] = None
    breaks: Tuple[int, ...] = ()

    @property
    def is_breaking(self) -> bool:
        return self.breaking is not None

    @property
    def short_hash(self) -> str:
        return self.hash[:SHORT_HASH_LENGTH]
