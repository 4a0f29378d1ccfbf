# -*- coding: utf-8 -*-
"""
contracts.stdlib.control.initializable
======================================

Versioned one-time setup guard for contracts that run behind a proxy.

A proxied implementation cannot use a constructor for its state: the
constructor runs against the *implementation's* storage, while the live
state sits in the proxy's. Setup therefore happens in ordinary entry points
that must run **exactly once per version** against the proxy's storage.

API
---
- ``@initializer``              setup entry point for version 1
- ``@reinitializer(version)``   setup entry point for a later version
- ``only_initializing()``       assert that a setup entry point is running
- ``disable_initializers()``    latch to 255 (bare implementation copies)
- ``initialized_version()``     current version (0 = uninitialized)
- ``is_initializing()``

Rules
-----
A guarded entry point for `version` reverts with ``INIT:ALREADY_INITIALIZED``
when another setup call is in progress or ``version <= initialized_version()``.
Otherwise it records `version`, marks the contract as initializing for the
duration of the call, and emits ``Initialized{version}`` once the body
returns. If the body fails the whole call reverts, so nothing is latched.

Versions only move forward: once V2's setup ran, V1's can never run again.
``disable_initializers()`` moves the counter to 255, which blocks every
version; implementation constructors call it so that a bare copy of the code
cannot be initialized and captured by a third party.

Storage layout
--------------
- ``b"init:version"``      → big-endian u8 (absent = 0)
- ``b"init:initializing"`` → ``b"\\x01"`` while a setup call runs, else absent
"""
from __future__ import annotations

import functools
from typing import Any, Callable, Final, TypeVar

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

VERSION_KEY: Final[bytes] = b"init:version"
INITIALIZING_KEY: Final[bytes] = b"init:initializing"
DISABLED_VERSION: Final[int] = 255

ERR_ALREADY: Final[bytes] = b"INIT:ALREADY_INITIALIZED"
ERR_NOT_INITIALIZING: Final[bytes] = b"INIT:NOT_INITIALIZING"

F = TypeVar("F", bound=Callable[..., Any])


# ---- Lazy stdlib accessors ---------------------------------------------------


def _std_storage():
    from stdlib import storage  # type: ignore

    return storage


def _std_events():
    from stdlib import events  # type: ignore

    return events


def _std_abi():
    from stdlib import abi  # type: ignore

    return abi


# ---- Readers -----------------------------------------------------------------


def initialized_version() -> int:
    return _std_storage().get_int(VERSION_KEY)


def is_initializing() -> bool:
    return _std_storage().get(INITIALIZING_KEY) == b"\x01"


# ---- Guards ------------------------------------------------------------------


def reinitializer(version: int) -> Callable[[F], F]:
    """
    Decorator factory guarding a setup entry point for `version` (1..255).
    """
    if not isinstance(version, int) or not 1 <= version <= DISABLED_VERSION:
        raise ValueError(f"initializer version must be in 1..{DISABLED_VERSION}, got {version!r}")

    def decorate(fn: F) -> F:
        @functools.wraps(fn)
        def guarded(*args: Any, **kwargs: Any) -> Any:
            abi = _std_abi()
            s = _std_storage()
            if is_initializing() or initialized_version() >= version:
                abi.revert(ERR_ALREADY)
            s.set_int(VERSION_KEY, version)
            s.set(INITIALIZING_KEY, b"\x01")
            result = fn(*args, **kwargs)
            s.delete(INITIALIZING_KEY)
            _std_events().emit(b"Initialized", {"version": version})
            return result

        guarded.initializer_version = version  # type: ignore[attr-defined]
        return guarded  # type: ignore[return-value]

    return decorate


def initializer(fn: F) -> F:
    """``@initializer`` is ``@reinitializer(1)``."""
    return reinitializer(1)(fn)


def only_initializing() -> None:
    """Revert unless called from inside a guarded setup entry point."""
    if not is_initializing():
        _std_abi().revert(ERR_NOT_INITIALIZING)


def disable_initializers() -> None:
    """
    Latch the guard permanently. Reverts if called during setup; a no-op
    (no event) when already disabled.
    """
    if is_initializing():
        _std_abi().revert(ERR_ALREADY)
    if initialized_version() != DISABLED_VERSION:
        _std_storage().set_int(VERSION_KEY, DISABLED_VERSION)
        _std_events().emit(b"Initialized", {"version": DISABLED_VERSION})
