# -*- coding: utf-8 -*-
"""
contracts.stdlib.math
=====================

Integer-only numeric envelopes for tuproxy contracts.

Contracts must avoid Python floats and unbounded ints leaking into storage;
balances, allowances and nonces are all u256. This package defines the
envelope and the domain guard, and `safe_uint` builds checked arithmetic on
top of it.

Conventions
-----------
- All functions are **pure** and deterministic (aside from calling `abi.revert`).
- Domain failures revert with short, stable tags (`UINT:*`).
"""

from __future__ import annotations

from typing import Final

__all__ = ["U256_MAX", "ERR_OOB", "require_u256"]


def _abi():
    from stdlib import abi  # type: ignore

    return abi


U256_MAX: Final[int] = (1 << 256) - 1

ERR_OOB: Final[bytes] = b"UINT:OOB"  # input outside [0, U256_MAX]


def require_u256(*xs: int) -> None:
    """Revert unless every argument is an int in [0, U256_MAX]."""
    for x in xs:
        if not isinstance(x, int) or isinstance(x, bool) or x < 0 or x > U256_MAX:
            _abi().revert(ERR_OOB)
