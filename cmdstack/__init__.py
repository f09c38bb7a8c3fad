"""Core package initializer.

Exposes a best-effort __version__ attribute so the CLI and API can surface
the current package version in editable/dev mode too.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cmdstack")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"


def get_version() -> str:
    """Return the resolved package version."""
    return __version__


__all__ = ["__version__", "get_version"]
