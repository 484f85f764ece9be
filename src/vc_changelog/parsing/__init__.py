"""
Commit parsing for vc_changelog.

This package turns raw commit records into classified entries. See
:mod:`vc_changelog.parsing.commit_parser` and
:mod:`vc_changelog.parsing.entry_model` for details.
"""

from .commit_parser import parse_commit, parse_commits, parse_log_output  # noqa: F401
from .entry_model import CommitEntry, RawCommit  # noqa: F401
