"""
Git client implementation for vc_changelog.

This module wraps the Git queries needed to build a changelog: the log
of commits in a range, the latest tag and the current HEAD. All
subprocess calls go through :meth:`GitClient._run` so that unit tests can
mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from vc_changelog.parsing.commit_parser import LOG_FORMAT, parse_log_output
from vc_changelog.parsing.entry_model import SHORT_HASH_LENGTH, RawCommit


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for querying a Git repository.

    Parameters
    ----------
    work_tree : Path, optional
        The working tree. Defaults to the current directory.
    git_dir : Path, optional
        The Git metadata directory. When only one of the two is given the
        other is derived from it.
    """

    def __init__(self, work_tree: Optional[Path] = None, git_dir: Optional[Path] = None) -> None:
        if git_dir is not None and work_tree is None:
            work_tree = Path(git_dir).parent
        elif work_tree is not None and git_dir is None:
            git_dir = Path(work_tree) / ".git"
        self.work_tree = Path(work_tree) if work_tree is not None else None
        self.git_dir = Path(git_dir) if git_dir is not None else None

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` directory is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _base_command(self) -> List[str]:
        cmd = ["git"]
        if self.git_dir is not None:
            cmd.append(f"--git-dir={self.git_dir}")
        if self.work_tree is not None:
            cmd.append(f"--work-tree={self.work_tree}")
        return cmd

    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command.

        Raises
        ------
        GitError
            If Git cannot be started, or exits with a non-zero status when
            ``check`` is True.
        """
        full_cmd = self._base_command() + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.work_tree,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.error("Failed to run Git: %s", e)
            raise GitError(f"Failed to run git: {e}") from e

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # History queries
    # ------------------------------------------------------------------
    def get_log_records(self, from_ref: Optional[str] = None, to_ref: str = "HEAD") -> List[RawCommit]:
        """Return the first-parent history of ``from_ref..to_ref``, newest first.

        Parameters
        ----------
        from_ref : str, optional
            Exclusive lower bound. When empty the whole history up to
            ``to_ref`` is returned.
        to_ref : str
            Inclusive upper bound, ``HEAD`` by default.
        """
        revision = f"{from_ref}..{to_ref}" if from_ref else to_ref
        result = self._run(
            ["log", "--first-parent", f"--format={LOG_FORMAT}", revision],
            check=True,
        )
        records = parse_log_output(result.stdout)
        logger.debug("Read %d commit(s) for %s", len(records), revision)
        return records

    def get_latest_tag(self) -> Optional[str]:
        """Return the hash of the most recent tagged commit, or ``None``."""
        result = self._run(["rev-list", "--tags", "--max-count=1"], check=True)
        return result.stdout.strip() or None

    def get_latest_tag_version(self) -> Optional[str]:
        """Return the name of the most recent tag reachable from HEAD."""
        result = self._run(["describe", "--tags", "--abbrev=0"], check=False)
        if result.returncode != 0:
            logger.debug("No tag found: %s", result.stderr.strip())
            return None
        return result.stdout.strip() or None

    def get_last_commit(self) -> str:
        """Return the full hash of HEAD."""
        result = self._run(["rev-parse", "HEAD"], check=True)
        return result.stdout.strip()

    def get_short_head(self) -> str:
        return self.get_last_commit()[:SHORT_HASH_LENGTH]
