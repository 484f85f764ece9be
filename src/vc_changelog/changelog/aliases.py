"""
Alias tables mapping commit tokens to display names.

Both tables are built once from configuration and never change during a
run. Lookups are exact and case-sensitive.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


FEATURES = "Features"
PERFORMANCE = "Performance"
BUG_FIXES = "Bug Fixes"

# Built-in sections in display order.
DEFAULT_SECTIONS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    (FEATURES, ("feat", "ft")),
    (PERFORMANCE, ("perf",)),
    (BUG_FIXES, ("fix", "fx")),
)


class SectionAliasTable:
    """Ordered mapping of section names to the type aliases that select them."""

    def __init__(self, sections: Sequence[Tuple[str, Sequence[str]]]) -> None:
        ordered: Dict[str, Tuple[str, ...]] = {}
        lookup: Dict[str, str] = {}
        for name, aliases in sections:
            merged = list(ordered.get(name, ()))
            merged.extend(alias for alias in aliases if alias not in merged)
            ordered[name] = tuple(merged)
        for name, aliases in ordered.items():
            for alias in aliases:
                # The first section listing an alias owns it.
                lookup.setdefault(alias, name)
        self._sections = MappingProxyType(ordered)
        self._lookup = MappingProxyType(lookup)

    @classmethod
    def from_config(cls, sections: Optional[Mapping[str, Sequence[str]]] = None) -> "SectionAliasTable":
        """Build the table from the built-in sections plus configured ones.

        A configured section reusing a built-in name adds its aliases to
        that section instead of replacing the defaults.
        """
        entries: List[Tuple[str, Sequence[str]]] = list(DEFAULT_SECTIONS)
        for name, aliases in (sections or {}).items():
            entries.append((name, tuple(aliases)))
        return cls(entries)

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self._sections)

    def section_for(self, alias: str) -> Optional[str]:
        """Return the section selected by a commit type, or ``None``."""
        return self._lookup.get(alias)

    def __repr__(self) -> str:
        return f"SectionAliasTable({dict(self._sections)!r})"


class ComponentAliasTable:
    """Mapping of component aliases to their display names."""

    def __init__(self, lookup: Optional[Mapping[str, str]] = None) -> None:
        self._lookup = MappingProxyType(dict(lookup or {}))

    @classmethod
    def from_config(cls, components: Optional[Mapping[str, Sequence[str]]] = None) -> "ComponentAliasTable":
        lookup: Dict[str, str] = {}
        for display_name, aliases in (components or {}).items():
            for alias in aliases:
                lookup.setdefault(alias, display_name)
        return cls(lookup)

    def display_name(self, component: str, no_component_label: str = "") -> str:
        """Resolve a component token to the name used for grouping."""
        if not component:
            return no_component_label
        return self._lookup.get(component, component)

    def __repr__(self) -> str:
        return f"ComponentAliasTable({dict(self._lookup)!r})"
