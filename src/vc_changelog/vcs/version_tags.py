"""
Semantic version handling for release tags.

Tags look like ``v1.4.2`` or ``1.4.2``. :func:`parse_tag` splits off the
optional prefix and validates the rest with :mod:`packaging.version`;
:func:`bump_tag` produces the next major, minor or patch release label.
"""

from __future__ import annotations

from typing import Tuple

from packaging.version import InvalidVersion, Version

from vc_changelog.error import ClogError, ErrorKind


MAJOR = "major"
MINOR = "minor"
PATCH = "patch"


def parse_tag(tag: str) -> Tuple[str, Tuple[int, int, int]]:
    """Split a release tag into its prefix and ``(major, minor, patch)``.

    Raises
    ------
    ClogError
        With kind ``SEMVER`` if the tag is not a version.
    """
    text = tag.strip()
    prefix = ""
    if text[:1] in {"v", "V"}:
        prefix, text = text[0], text[1:]
    try:
        version = Version(text)
    except InvalidVersion as exc:
        raise ClogError(ErrorKind.SEMVER, f"{tag.strip()!r}") from exc
    release = tuple(version.release) + (0, 0)
    return prefix, (release[0], release[1], release[2])


def bump_tag(tag: str, part: str) -> str:
    """Return the label following ``tag`` when ``part`` is increased."""
    prefix, (major, minor, patch) = parse_tag(tag)
    if part == MAJOR:
        major, minor, patch = major + 1, 0, 0
    elif part == MINOR:
        minor, patch = minor + 1, 0
    elif part == PATCH:
        patch += 1
    else:
        raise ValueError(f"unknown version part: {part}")
    return f"{prefix}{major}.{minor}.{patch}"
