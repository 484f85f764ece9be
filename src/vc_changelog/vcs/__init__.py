"""
Version control system (VCS) integration.

This package contains the Git client used to read commit history and
tags, and helpers for semantic version tags.
"""

from .git_client import GitClient, GitError  # noqa: F401
from .version_tags import bump_tag, parse_tag  # noqa: F401
