"""
Changelog building for vc_changelog.

This package aggregates parsed commits into a document, resolves links,
renders the document and writes it out. See the individual modules for
details.
"""

from .aggregator import ChangelogDocument, ComponentGroup, Section, aggregate  # noqa: F401
from .aliases import ComponentAliasTable, SectionAliasTable  # noqa: F401
from .link_style import LinkStyle, LinkTemplates, render_links, resolve  # noqa: F401
from .renderer import ChangelogFormat, render  # noqa: F401
from .writer import FileRoles, write  # noqa: F401
