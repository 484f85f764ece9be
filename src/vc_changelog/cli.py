"""
Command line interface for the vc_changelog tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``vc-changelog`` command. It loads the
configuration, reads the commit history, builds and renders the
changelog, and writes it out. Errors raised by any of those steps are
reported here and nowhere else.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click

from vc_changelog import __version__
from vc_changelog.changelog.aggregator import aggregate
from vc_changelog.changelog.aliases import ComponentAliasTable, SectionAliasTable
from vc_changelog.changelog.link_style import LinkStyle, resolve
from vc_changelog.changelog.renderer import ChangelogFormat, render
from vc_changelog.changelog.writer import FileRoles, write
from vc_changelog.config.loader import ClogConfig, load_config
from vc_changelog.error import ClogError, ErrorKind
from vc_changelog.parsing.commit_parser import parse_commits
from vc_changelog.vcs.git_client import GitClient, GitError
from vc_changelog.vcs.version_tags import MAJOR, MINOR, PATCH, bump_tag

# Create a module-level logger. Attach a null handler and disable
# propagation to avoid logging errors when the root logger's stream is
# closed (such as during unit tests). When logging is configured by
# the CLI, root handlers will be added and messages will propagate.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# Used as the base when bumping a version in a repository without tags.
INITIAL_VERSION = "0.0.0"


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

def print_success(message: str, indent: int = 0):
    """Print a success message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}", err=True)


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def apply_overrides(config: ClogConfig, **overrides) -> ClogConfig:
    """Return ``config`` with every non-``None`` override applied."""
    values = {key: value for key, value in overrides.items() if value is not None}
    if "link_style" in values:
        values["link_style"] = LinkStyle.parse(values["link_style"])
    if "output_format" in values:
        values["output_format"] = ChangelogFormat.parse(values["output_format"])
    if not values.get("changelog") and (values.get("outfile") or values.get("infile")):
        # File roles given on the command line replace the configured ones.
        values["changelog"] = None
    return replace(config, **values)


def resolve_version(client: GitClient, setversion: Optional[str], bump: Optional[str]) -> str:
    """Determine the version label for the release being generated."""
    if setversion:
        return setversion
    if bump:
        latest = client.get_latest_tag_version() or INITIAL_VERSION
        version = bump_tag(latest, bump)
        logger.debug("Bumped %s version %s -> %s", bump, latest, version)
        return version
    return client.get_short_head()


def resolve_from_ref(client: GitClient, config: ClogConfig) -> Optional[str]:
    if config.from_ref:
        return config.from_ref
    if config.from_latest_tag:
        tag_commit = client.get_latest_tag()
        logger.debug("Latest tagged commit: %s", tag_commit)
        return tag_commit
    return None


def resolve_work_tree(config: ClogConfig) -> Optional[Path]:
    """Return the working tree Git should run in.

    Explicit ``git-dir``/``work-tree`` settings win. Otherwise the
    repository enclosing the current directory is used, or ``None`` when
    there is none and Git is left to report it.
    """
    if config.git_work_tree is not None or config.git_dir is not None:
        return config.git_work_tree
    try:
        cwd = Path.cwd()
    except OSError as exc:
        raise ClogError(ErrorKind.CURRENT_DIR, str(exc)) from exc
    repo_root = GitClient.find_repo_root(cwd)
    logger.debug("Detected repository root: %s", repo_root)
    return repo_root


def build_changelog(
    config: ClogConfig,
    client: GitClient,
    version_label: str,
    to_ref: str = "HEAD",
    patch_version: bool = False,
    date: Optional[str] = None,
) -> str:
    """Read the history, aggregate it and render the changelog text."""
    section_aliases = SectionAliasTable.from_config(config.sections)
    component_aliases = ComponentAliasTable.from_config(config.components)
    templates = resolve(config.repository, config.link_style)
    logger.debug("Using %r and %r", section_aliases, component_aliases)

    from_ref = resolve_from_ref(client, config)
    records = client.get_log_records(from_ref, to_ref)
    document = aggregate(
        parse_commits(records),
        section_aliases,
        component_aliases,
        from_ref,
        version_label=version_label,
        subtitle=config.subtitle,
        date=date,
        patch_version=patch_version,
    )
    logger.debug("Rendering %d section(s) as %s", len(document.sections), config.output_format.value)
    return render(document, config.output_format, templates)


@click.command()
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Configuration file (default: .clog.toml in the current directory).")
@click.option("-r", "--repository", help="Repository URL used to build commit and issue links.")
@click.option("-l", "--link-style", help="Link style: github, gitlab, stash, cgit or none.")
@click.option("-s", "--subtitle", help="Release title shown after the version.")
@click.option("-f", "--from", "from_ref", help="Exclude this commit and everything before it.")
@click.option("-t", "--to", "to_ref", default="HEAD", show_default=True, help="Last commit to include.")
@click.option("-F", "--from-latest-tag", is_flag=True, help="Start from the latest tagged commit.")
@click.option("--setversion", help="Version label for this release.")
@click.option("-M", "--major", "bump", flag_value=MAJOR, help="Bump the major version of the latest tag.")
@click.option("-m", "--minor", "bump", flag_value=MINOR, help="Bump the minor version of the latest tag.")
@click.option("-p", "--patch", "bump", flag_value=PATCH, help="Bump the patch version of the latest tag.")
@click.option("-C", "--changelog", help="Changelog file to prepend to (read and written).")
@click.option("-o", "--outfile", help="File to write the changelog to.")
@click.option("-i", "--infile", help="File holding older changelog content.")
@click.option("-g", "--git-dir", type=click.Path(file_okay=False, path_type=Path), help="Git metadata directory.")
@click.option("-w", "--work-tree", type=click.Path(file_okay=False, path_type=Path), help="Git working tree.")
@click.option("-T", "--format", "output_format", help="Output format: markdown or json.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="vc-changelog")
def main(
    config_path: Optional[Path],
    repository: Optional[str],
    link_style: Optional[str],
    subtitle: Optional[str],
    from_ref: Optional[str],
    to_ref: str,
    from_latest_tag: bool,
    setversion: Optional[str],
    bump: Optional[str],
    changelog: Optional[str],
    outfile: Optional[str],
    infile: Optional[str],
    git_dir: Optional[Path],
    work_tree: Optional[Path],
    output_format: Optional[str],
    verbose: bool,
) -> None:
    """Generate a changelog from conventional commit messages."""
    # Use force=True to ensure handlers are reconfigured on subsequent
    # invocations (important for tests).
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    try:
        config = apply_overrides(
            load_config(config_path),
            repository=repository,
            subtitle=subtitle,
            link_style=link_style,
            output_format=output_format,
            changelog=changelog,
            outfile=outfile,
            infile=infile,
            from_ref=from_ref,
            from_latest_tag=True if from_latest_tag else None,
            git_dir=git_dir,
            git_work_tree=work_tree,
        )
        logger.debug("Effective configuration: %s", config)

        client = GitClient(work_tree=resolve_work_tree(config), git_dir=config.git_dir)
        version_label = resolve_version(client, setversion, bump)
        date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        text = build_changelog(
            config,
            client,
            version_label,
            to_ref=to_ref,
            patch_version=bump == PATCH,
            date=date,
        )

        roles = FileRoles.from_paths(config.changelog, config.outfile, config.infile)
        write(text, roles)
        if roles.outfile is not None:
            print_success(f"Wrote changelog for {version_label} to {roles.outfile}")
    except ClogError as exc:
        exc.report_and_exit()
    except GitError as exc:
        ClogError(ErrorKind.UNKNOWN, f"git: {exc}").report_and_exit()
