"""
Configuration loading for vc_changelog.

Provides a loader for the ``.clog.toml`` file. See
:mod:`vc_changelog.config.loader` for implementation details.
"""

from .loader import ClogConfig, load_config  # noqa: F401
