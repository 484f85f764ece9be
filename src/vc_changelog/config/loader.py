"""
Configuration loader for vc_changelog.

The tool reads an optional TOML file, ``.clog.toml`` in the current
directory by default. Its ``[clog]`` table holds the general options;
the ``[sections]`` and ``[components]`` tables map display names to the
aliases that select them::

    [clog]
    repository = "https://github.com/owner/project"
    link-style = "github"
    changelog = "CHANGELOG.md"

    [sections]
    "Documentation" = ["docs"]

    [components]
    "Command Line" = ["cli"]

A missing file yields the defaults. Any other problem raises
:class:`vc_changelog.error.ClogError`.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from vc_changelog.changelog.link_style import LinkStyle
from vc_changelog.changelog.renderer import ChangelogFormat
from vc_changelog.error import ClogError, ErrorKind


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_CONFIG_FILE = ".clog.toml"

_STRING_KEYS = (
    "repository",
    "subtitle",
    "link-style",
    "output-format",
    "changelog",
    "outfile",
    "infile",
    "from",
    "git-dir",
    "git-work-tree",
)


@dataclass
class ClogConfig:
    """Validated configuration values."""

    repository: Optional[str] = None
    subtitle: Optional[str] = None
    link_style: LinkStyle = LinkStyle.GITHUB
    output_format: ChangelogFormat = ChangelogFormat.MARKDOWN
    changelog: Optional[str] = None
    outfile: Optional[str] = None
    infile: Optional[str] = None
    from_ref: Optional[str] = None
    from_latest_tag: bool = False
    git_dir: Optional[Path] = None
    git_work_tree: Optional[Path] = None
    sections: Dict[str, List[str]] = field(default_factory=dict)
    components: Dict[str, List[str]] = field(default_factory=dict)


def _get_working_directory() -> Path:
    try:
        return Path.cwd()
    except OSError as exc:
        raise ClogError(ErrorKind.CURRENT_DIR, str(exc)) from exc


def _alias_table(data: Dict[str, Any], name: str) -> Dict[str, List[str]]:
    table = data.get(name, {})
    if not isinstance(table, dict):
        raise ClogError(ErrorKind.CONFIG_FORMAT, f"'[{name}]' must be a table")
    result: Dict[str, List[str]] = {}
    for display_name, aliases in table.items():
        if not isinstance(aliases, list) or not all(isinstance(a, str) for a in aliases):
            raise ClogError(
                ErrorKind.CONFIG_FORMAT,
                f"'{name}.{display_name}' must be a list of strings",
            )
        result[display_name] = list(aliases)
    return result


def parse_config(data: Dict[str, Any], source: str = DEFAULT_CONFIG_FILE) -> ClogConfig:
    """Validate a parsed TOML document and return a :class:`ClogConfig`."""
    clog = data.get("clog")
    if not isinstance(clog, dict):
        logger.error("Configuration file %s has no [clog] table", source)
        raise ClogError(ErrorKind.CONFIG_FORMAT, f"missing [clog] table in {source}")

    for key in _STRING_KEYS:
        if key in clog and not isinstance(clog[key], str):
            raise ClogError(ErrorKind.CONFIG_FORMAT, f"'{key}' must be a string")
    if "from-latest-tag" in clog and not isinstance(clog["from-latest-tag"], bool):
        raise ClogError(ErrorKind.CONFIG_FORMAT, "'from-latest-tag' must be a boolean")

    config = ClogConfig(
        repository=clog.get("repository") or None,
        subtitle=clog.get("subtitle") or None,
        link_style=LinkStyle.parse(clog.get("link-style")),
        output_format=ChangelogFormat.parse(clog.get("output-format")),
        changelog=clog.get("changelog") or None,
        outfile=clog.get("outfile") or None,
        infile=clog.get("infile") or None,
        from_ref=clog.get("from") or None,
        from_latest_tag=clog.get("from-latest-tag", False),
        git_dir=Path(clog["git-dir"]) if clog.get("git-dir") else None,
        git_work_tree=Path(clog["git-work-tree"]) if clog.get("git-work-tree") else None,
        sections=_alias_table(data, "sections"),
        components=_alias_table(data, "components"),
    )
    if config.changelog and (config.outfile or config.infile):
        logger.warning(
            "'changelog' is set together with 'outfile'/'infile'; using '%s' for both",
            config.changelog,
        )
    return config


def load_config(config_path: Optional[Path] = None) -> ClogConfig:
    """Load the configuration file and return it.

    Args:
        config_path: Path of the TOML file. Relative paths are resolved
                     against the current directory. Defaults to
                     ``.clog.toml`` in the current directory.

    Returns:
        The validated configuration, or the defaults when the file does
        not exist.

    Raises:
        ClogError: ``CURRENT_DIR`` if the working directory is unavailable,
            ``TOML_READ`` if the file cannot be read, ``CONFIG_PARSE`` for
            invalid TOML, ``CONFIG_FORMAT`` or ``LINK_STYLE`` for invalid
            values.
    """
    path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_FILE)
    if not path.is_absolute():
        path = _get_working_directory() / path

    if not path.exists():
        logger.debug("No configuration file at %s; using defaults", path)
        return ClogConfig()

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Failed to read configuration file: %s", exc)
        raise ClogError(ErrorKind.TOML_READ, f"{path}: {exc}") from exc

    try:
        data = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        logger.error("Failed to parse configuration file: %s", exc)
        raise ClogError(ErrorKind.CONFIG_PARSE, f"{path.name}: {exc}") from exc

    config = parse_config(data, source=path.name)
    logger.debug("Loaded configuration from: %s", path)
    logger.debug("Configuration data: %s", config)
    return config
