"""
Parser turning raw commit records into :class:`CommitEntry` objects.

The subject line must follow ``type(component)!: subject`` where the
component and the ``!`` are optional. Records that do not match are not
errors: :func:`parse_commit` returns ``None`` and callers skip them.

The body is scanned for these markers:

* closing keywords such as ``closes #12, #13`` or ``fixes #4``
* ``breaks #7`` or ``broke #7`` naming issues the change breaks
* a ``BREAKING CHANGE:`` block describing an incompatible change
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator, List, Optional, Tuple

from vc_changelog.parsing.entry_model import CommitEntry, RawCommit


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Separator emitted after each record by LOG_FORMAT.
RECORD_END = "==END=="
LOG_FORMAT = f"%H%n%s%n%b%n{RECORD_END}"

SUBJECT_RE = re.compile(
    r"^(?P<type>[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*)"
    r"(?:\((?P<component>[A-Za-z0-9_./-]*)\))?"
    r"(?P<bang>!)?"
    r": (?P<subject>.*\S.*)$"
)
CLOSES_RE = re.compile(
    r"\b(?:close[sd]?|fix(?:e[sd])?|resolve[sd]?)\s+(?P<refs>#\d+(?:\s*,?\s*#\d+)*)",
    re.IGNORECASE,
)
BREAKS_RE = re.compile(
    r"\b(?:breaks|broke)\s+(?P<refs>#\d+(?:\s*,?\s*#\d+)*)",
    re.IGNORECASE,
)
ISSUE_RE = re.compile(r"#(\d+)")
BREAKING_RE = re.compile(r"^BREAKING[ -]CHANGE:\s*(?P<text>.*)$")


def parse_commit(raw: RawCommit) -> Optional[CommitEntry]:
    """Parse a raw commit record.

    Parameters
    ----------
    raw : RawCommit
        The hash and message of the commit.

    Returns
    -------
    Optional[CommitEntry]
        The structured entry, or ``None`` when the subject line does not
        follow the conventional grammar.
    """
    match = SUBJECT_RE.match(raw.subject.strip())
    if match is None:
        logger.debug("Skipping non-conventional commit %s: %r", raw.hash, raw.subject)
        return None

    subject = match.group("subject").strip()
    body = raw.body
    breaking = extract_breaking(body)
    if breaking is None and match.group("bang"):
        breaking = subject

    return CommitEntry(
        hash=raw.hash.strip(),
        raw_type=match.group("type"),
        component=match.group("component") or "",
        subject=subject,
        closes=extract_closes(body),
        breaking=breaking,
        breaks=extract_breaks(body),
    )


def _issue_refs(pattern: re.Pattern, body: str) -> Tuple[int, ...]:
    seen: List[int] = []
    for match in pattern.finditer(body):
        for number in ISSUE_RE.findall(match.group("refs")):
            issue = int(number)
            if issue not in seen:
                seen.append(issue)
    return tuple(seen)


def extract_closes(body: str) -> Tuple[int, ...]:
    """Return the issue numbers referenced by closing keywords in ``body``."""
    return _issue_refs(CLOSES_RE, body)


def extract_breaks(body: str) -> Tuple[int, ...]:
    """Return the issue numbers referenced by ``breaks``/``broke`` in ``body``."""
    return _issue_refs(BREAKS_RE, body)


def extract_breaking(body: str) -> Optional[str]:
    """Return the text of the first ``BREAKING CHANGE:`` block in ``body``.

    The block starts at the marker and ends at the next blank line. An
    empty string is returned for a marker with no text.
    """
    lines = body.splitlines()
    for index, line in enumerate(lines):
        match = BREAKING_RE.match(line.strip())
        if match is None:
            continue
        block = [match.group("text").strip()]
        for follow in lines[index + 1:]:
            if not follow.strip():
                break
            block.append(follow.strip())
        return "\n".join(part for part in block if part)
    return None


def parse_log_output(output: str) -> List[RawCommit]:
    """Split ``git log --format=LOG_FORMAT`` output into raw records."""
    records: List[RawCommit] = []
    for chunk in output.split(RECORD_END):
        lines = chunk.strip("\n").splitlines()
        if not lines or not lines[0].strip():
            continue
        commit_hash = lines[0].strip()
        subject = lines[1] if len(lines) > 1 else ""
        body = "\n".join(lines[2:]).strip("\n")
        message = f"{subject}\n\n{body}" if body else subject
        records.append(RawCommit(hash=commit_hash, message=message))
    return records


def parse_commits(records: Iterable[RawCommit]) -> Iterator[CommitEntry]:
    """Yield the conventional entries among ``records``, keeping their order."""
    for raw in records:
        entry = parse_commit(raw)
        if entry is not None:
            yield entry
