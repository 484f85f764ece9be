"""
Rendering of a :class:`ChangelogDocument` to Markdown or JSON.

Rendering is pure: the same document, format and link templates always
produce the same text. The JSON layout is part of the tool's external
interface::

    {
      "version": str,
      "patch_version": bool,
      "date": str | null,
      "subtitle": str | null,
      "sections": [
        {"title": str,
         "components": [
           {"component": str | null, "commits": [<commit>, ...]}
         ]}
      ],
      "breaking_changes": [<commit>, ...]
    }

where ``<commit>`` is::

    {"hash": str, "short_hash": str, "type": str, "component": str | null,
     "subject": str, "closes": [int], "breaking": str | null,
     "breaks": [int], "commit_link": str | null,
     "issue_links": [{"issue": int, "issue_link": str | null}],
     "break_links": [{"issue": int, "issue_link": str | null}]}

``issue_links`` follows ``closes`` and ``break_links`` follows ``breaks``.
"""

from __future__ import annotations

import enum
import json
from typing import Any, Dict, List, Optional, Tuple

from vc_changelog.changelog.aggregator import ChangelogDocument, ComponentGroup, Section
from vc_changelog.changelog.link_style import PLAIN_LINKS, LinkTemplates, render_links
from vc_changelog.error import ClogError, ErrorKind
from vc_changelog.parsing.entry_model import CommitEntry


BREAKING_SECTION = "Breaking Changes"
# Trailing blank lines keep a prepended release apart from older content.
RELEASE_SEPARATOR = "\n\n\n"


class ChangelogFormat(enum.Enum):
    MARKDOWN = "markdown"
    JSON = "json"

    @classmethod
    def parse(cls, token: Optional[str]) -> "ChangelogFormat":
        """Parse a format token case-insensitively; ``None`` means Markdown."""
        if token is None:
            return cls.MARKDOWN
        value = token.strip().lower()
        for fmt in cls:
            if fmt.value == value:
                return fmt
        raise ClogError(ErrorKind.CONFIG_FORMAT, f"unknown output format {token!r}")


def render(
    document: ChangelogDocument,
    fmt: ChangelogFormat = ChangelogFormat.MARKDOWN,
    templates: LinkTemplates = PLAIN_LINKS,
) -> str:
    """Serialize ``document`` in ``fmt`` using ``templates`` for links."""
    if fmt is ChangelogFormat.JSON:
        return render_json(document, templates)
    return render_markdown(document, templates)


# ---------------------------------------------------------------------------
# Markdown
# ---------------------------------------------------------------------------

def _markdown_header(document: ChangelogDocument) -> List[str]:
    level = "###" if document.patch_version else "##"
    title = f"{level} {document.version_label}"
    if document.subtitle:
        title += f" {document.subtitle}"
    if document.date:
        title += f" ({document.date})"
    return [f'<a name="{document.version_label}"></a>', title, ""]


def _entry_line(prefix: str, text: str, entry: CommitEntry, templates: LinkTemplates, with_issues: bool) -> str:
    links = render_links(templates, entry)
    refs = links.hash
    if with_issues and links.closes:
        refs += ", closes " + ", ".join(links.closes)
    if with_issues and links.breaks:
        refs += ", breaks " + ", ".join(links.breaks)
    return f"{prefix} {text} ({refs})"


def _markdown_group(group: ComponentGroup, templates: LinkTemplates) -> List[str]:
    if group.uncategorized:
        return [_entry_line("*", entry.subject, entry, templates, True) for entry in group.entries]
    if len(group.entries) == 1:
        entry = group.entries[0]
        return [_entry_line(f"* **{group.name}:**", entry.subject, entry, templates, True)]
    lines = [f"* **{group.name}:**"]
    lines.extend(_entry_line("  *", entry.subject, entry, templates, True) for entry in group.entries)
    return lines


def _markdown_section(section: Section, templates: LinkTemplates) -> List[str]:
    lines = ["", f"#### {section.name}", ""]
    for group in section.groups:
        lines.extend(_markdown_group(group, templates))
    return lines


def _markdown_breaking(document: ChangelogDocument, templates: LinkTemplates) -> List[str]:
    breaking = document.breaking_entries
    if not breaking:
        return []
    lines = ["", f"#### {BREAKING_SECTION}", ""]
    for group, entry in breaking:
        text = " ".join((entry.breaking or entry.subject).split())
        prefix = "*" if group.uncategorized else f"* **{group.name}:**"
        lines.append(_entry_line(prefix, text, entry, templates, False))
    return lines


def render_markdown(document: ChangelogDocument, templates: LinkTemplates = PLAIN_LINKS) -> str:
    lines = _markdown_header(document)
    for section in document.sections:
        lines.extend(_markdown_section(section, templates))
    lines.extend(_markdown_breaking(document, templates))
    return "\n".join(lines) + RELEASE_SEPARATOR


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def _json_issue_links(issues: Tuple[int, ...], templates: LinkTemplates) -> List[Dict[str, Any]]:
    return [{"issue": issue, "issue_link": templates.issue_url(issue)} for issue in issues]


def _json_commit(group: ComponentGroup, entry: CommitEntry, templates: LinkTemplates) -> Dict[str, Any]:
    return {
        "hash": entry.hash,
        "short_hash": entry.short_hash,
        "type": entry.raw_type,
        "component": None if group.uncategorized else group.name,
        "subject": entry.subject,
        "closes": list(entry.closes),
        "breaking": entry.breaking,
        "breaks": list(entry.breaks),
        "commit_link": templates.commit_url(entry.hash),
        "issue_links": _json_issue_links(entry.closes, templates),
        "break_links": _json_issue_links(entry.breaks, templates),
    }


def render_json(document: ChangelogDocument, templates: LinkTemplates = PLAIN_LINKS) -> str:
    payload = {
        "version": document.version_label,
        "patch_version": document.patch_version,
        "date": document.date,
        "subtitle": document.subtitle or None,
        "sections": [
            {
                "title": section.name,
                "components": [
                    {
                        "component": None if group.uncategorized else group.name,
                        "commits": [_json_commit(group, entry, templates) for entry in group.entries],
                    }
                    for group in section.groups
                ],
            }
            for section in document.sections
        ],
        "breaking_changes": [
            _json_commit(group, entry, templates) for group, entry in document.breaking_entries
        ],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
