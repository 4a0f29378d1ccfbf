# -*- coding: utf-8 -*-
"""
contracts.stdlib.control
========================

Storage-backed control primitives for tuproxy contracts.

Currently this is the versioned initialization guard used by proxied
implementations (see `contracts.stdlib.control.initializable`):

    from contracts.stdlib.control import initializer, reinitializer

    @initializer
    def initialize(name: str, symbol: str) -> None:
        ...

All functions only use VM-safe `stdlib` modules: `storage`, `events`, and `abi`.

Storage Layout
--------------
- Initialized version:
    key = b"init:version"          → big-endian u8 (absent = 0)
- Setup-in-progress marker:
    key = b"init:initializing"     → b"\x01" or absent
"""
from __future__ import annotations

from .initializable import (
    DISABLED_VERSION,
    INITIALIZING_KEY,
    VERSION_KEY,
    disable_initializers,
    initialized_version,
    initializer,
    is_initializing,
    only_initializing,
    reinitializer,
)

__all__ = [
    "VERSION_KEY",
    "INITIALIZING_KEY",
    "DISABLED_VERSION",
    "initializer",
    "reinitializer",
    "only_initializing",
    "disable_initializers",
    "initialized_version",
    "is_initializing",
]
