# -*- coding: utf-8 -*-
"""
contracts.tests
================

Contract-focused tests: the transparent proxy, ProxyAdmin, initializer guard,
permit extension and the off-chain upgrade tooling. Fixtures live in
``conftest.py``; every test runs against a fresh in-process chain.
"""
from __future__ import annotations

import os

__version__ = "0.1.0"


def _set_if_absent(key: str, value: str) -> None:
    """Set environment variable only if it's not already present."""
    if key not in os.environ or os.environ.get(key) in ("", None):
        os.environ[key] = value


# Deadlines and block timestamps are compared as UTC seconds.
_set_if_absent("TZ", "UTC")

__all__ = ["__version__"]
