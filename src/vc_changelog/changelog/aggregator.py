"""
Aggregation of commit entries into a changelog document.

:func:`aggregate` makes a single pass over the parsed entries, drops the
ones whose type has no section alias, and files the rest under their
section and component. Sections come out in alias-table order, component
groups in first-seen order, and entries in input order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from vc_changelog.changelog.aliases import ComponentAliasTable, SectionAliasTable
from vc_changelog.parsing.entry_model import CommitEntry


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


@dataclass(frozen=True)
class ComponentGroup:
    """Entries of one section sharing a component display name."""

    name: str
    entries: Tuple[CommitEntry, ...]
    uncategorized: bool = False


@dataclass(frozen=True)
class Section:
    """A top-level changelog heading and its component groups."""

    name: str
    groups: Tuple[ComponentGroup, ...]

    @property
    def entries(self) -> Tuple[CommitEntry, ...]:
        return tuple(entry for group in self.groups for entry in group.entries)


@dataclass(frozen=True)
class ChangelogDocument:
    """The in-memory changelog for one release.

    Attributes
    ----------
    version_label : str
        Release version or tag.
    sections : Tuple[Section, ...]
        Non-empty sections in display order.
    subtitle : str, optional
        Constant release title.
    date : str, optional
        Release date, already formatted.
    patch_version : bool
        Patch releases use a lower heading level in Markdown.
    """

    version_label: str
    sections: Tuple[Section, ...] = ()
    subtitle: Optional[str] = None
    date: Optional[str] = None
    patch_version: bool = False

    @property
    def entries(self) -> Tuple[CommitEntry, ...]:
        return tuple(entry for section in self.sections for entry in section.entries)

    @property
    def breaking_entries(self) -> Tuple[Tuple[ComponentGroup, CommitEntry], ...]:
        """Breaking entries with the group they belong to, in document order."""
        return tuple(
            (group, entry)
            for section in self.sections
            for group in section.groups
            for entry in group.entries
            if entry.is_breaking
        )


def _matches_boundary(commit_hash: str, boundary: str) -> bool:
    return commit_hash.startswith(boundary) or boundary.startswith(commit_hash)


def aggregate(
    entries: Iterable[CommitEntry],
    section_aliases: SectionAliasTable,
    component_aliases: ComponentAliasTable,
    from_boundary: Optional[str] = None,
    *,
    version_label: str = "",
    subtitle: Optional[str] = None,
    date: Optional[str] = None,
    patch_version: bool = False,
    no_component_label: str = "",
) -> ChangelogDocument:
    """Build a :class:`ChangelogDocument` from parsed entries.

    Parameters
    ----------
    entries : Iterable[CommitEntry]
        Parsed entries, newest first.
    section_aliases : SectionAliasTable
        Maps commit types to section names. Entries with an unknown type
        are dropped.
    component_aliases : ComponentAliasTable
        Maps component tokens to display names.
    from_boundary : str, optional
        Hash (full or abbreviated) of the first commit to exclude. The
        boundary entry and everything after it are left out. When the hash
        never appears every entry is kept.

    Returns
    -------
    ChangelogDocument
        The aggregated document.
    """
    boundary = (from_boundary or "").strip()
    # Groups are keyed by (display name, uncategorized) so the no-component
    # bucket never merges with a real component sharing its label.
    by_section: Dict[str, Dict[Tuple[str, bool], List[CommitEntry]]] = {}

    for entry in entries:
        if boundary and _matches_boundary(entry.hash, boundary):
            logger.debug("Reached boundary commit %s; stopping", entry.hash)
            break
        section = section_aliases.section_for(entry.raw_type)
        if section is None:
            logger.debug("Dropping %s: no section for type %r", entry.hash, entry.raw_type)
            continue
        component = component_aliases.display_name(entry.component, no_component_label)
        groups = by_section.setdefault(section, {})
        groups.setdefault((component, not entry.component), []).append(entry)

    sections = tuple(
        Section(
            name=name,
            groups=tuple(
                ComponentGroup(name=component, entries=tuple(items), uncategorized=is_uncategorized)
                for (component, is_uncategorized), items in by_section[name].items()
            ),
        )
        for name in section_aliases.names
        if by_section.get(name)
    )
    logger.debug("Aggregated %d section(s)", len(sections))
    return ChangelogDocument(
        version_label=version_label,
        sections=sections,
        subtitle=subtitle,
        date=date,
        patch_version=patch_version,
    )
