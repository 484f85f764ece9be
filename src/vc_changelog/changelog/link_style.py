"""
Hyperlink templates for commit hashes and issue references.

A :class:`LinkStyle` names the forge hosting the repository. Combined
with the repository URL it yields :class:`LinkTemplates`, which the
renderer uses to turn hashes and issue numbers into links. Without a
repository URL, or with ``LinkStyle.NONE``, everything renders as plain
text.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple

from vc_changelog.error import ClogError, ErrorKind
from vc_changelog.parsing.entry_model import SHORT_HASH_LENGTH, CommitEntry


class LinkStyle(enum.Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    STASH = "stash"
    CGIT = "cgit"
    NONE = "none"

    @classmethod
    def parse(cls, token: Optional[str]) -> "LinkStyle":
        """Parse a style token case-insensitively; ``None`` means GitHub.

        Raises
        ------
        ClogError
            With kind ``LINK_STYLE`` for an unrecognised token.
        """
        if token is None:
            return cls.GITHUB
        value = token.strip().lower()
        for style in cls:
            if style.value == value:
                return style
        valid = ", ".join(style.value for style in cls)
        raise ClogError(ErrorKind.LINK_STYLE, f"{token!r} (valid values: {valid})")


# (commit path, issue path) appended to the repository URL. ``None`` means
# the forge has no page for that kind of reference.
_PATHS = {
    LinkStyle.GITHUB: ("/commit/{hash}", "/issues/{issue}"),
    LinkStyle.GITLAB: ("/commit/{hash}", "/issues/{issue}"),
    LinkStyle.STASH: ("/commits/{hash}", None),
    LinkStyle.CGIT: ("/commit/?id={hash}", None),
}


@dataclass(frozen=True)
class LinkTemplates:
    """URL templates with ``{hash}`` and ``{issue}`` placeholders."""

    commit_template: Optional[str] = None
    issue_template: Optional[str] = None

    def commit_url(self, commit_hash: str) -> Optional[str]:
        if self.commit_template is None:
            return None
        return self.commit_template.format(hash=commit_hash)

    def issue_url(self, issue: int) -> Optional[str]:
        if self.issue_template is None:
            return None
        return self.issue_template.format(issue=issue)


PLAIN_LINKS = LinkTemplates()


@dataclass(frozen=True)
class RenderedLinks:
    """Inline Markdown for an entry's hash and referenced issues."""

    hash: str
    closes: Tuple[str, ...]
    breaks: Tuple[str, ...] = ()


def _normalize_repository(url: str) -> str:
    url = url.strip().rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def resolve(repository_url: Optional[str], style: LinkStyle) -> LinkTemplates:
    """Build the link templates for ``repository_url`` in ``style``."""
    if style is LinkStyle.NONE or not repository_url or not repository_url.strip():
        return PLAIN_LINKS
    repo = _normalize_repository(repository_url)
    # Braces in the URL itself must survive str.format.
    repo = repo.replace("{", "{{").replace("}", "}}")
    commit_path, issue_path = _PATHS[style]
    return LinkTemplates(
        commit_template=repo + commit_path,
        issue_template=repo + issue_path if issue_path else None,
    )


def link_hash(templates: LinkTemplates, commit_hash: str) -> str:
    url = templates.commit_url(commit_hash)
    if url is None:
        return commit_hash
    return f"[{commit_hash[:SHORT_HASH_LENGTH]}]({url})"


def link_issue(templates: LinkTemplates, issue: int) -> str:
    url = templates.issue_url(issue)
    if url is None:
        return f"#{issue}"
    return f"[#{issue}]({url})"


def render_links(templates: LinkTemplates, entry: CommitEntry) -> RenderedLinks:
    """Render the hash and issue references of ``entry`` as inline Markdown."""
    return RenderedLinks(
        hash=link_hash(templates, entry.hash),
        closes=tuple(link_issue(templates, issue) for issue in entry.closes),
        breaks=tuple(link_issue(templates, issue) for issue in entry.breaks),
    )
