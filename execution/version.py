"""
execution.version — version string.

Tiny and dependency-free so it can be imported very early (CLI `--version`,
deployment records).

Usage:
    from execution.version import __version__
"""

from __future__ import annotations

# Bump this when making a tagged release. Use semver (major.minor.patch).
__version__ = "0.1.0"

__all__ = ["__version__"]
