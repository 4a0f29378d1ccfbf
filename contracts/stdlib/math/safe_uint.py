# -*- coding: utf-8 -*-
"""
contracts.stdlib.math.safe_uint
===============================

Checked u256 arithmetic for ledger code (balances, allowances, supply).

- Checked variants revert via `stdlib.abi.revert(b"...")` on overflow or
  underflow; they never wrap and never clamp.
- Arguments are domain-checked (0..U256_MAX) first.
"""

from __future__ import annotations

from typing import Final

from . import U256_MAX, require_u256


def _abi():
    from stdlib import abi  # type: ignore

    return abi


ERR_OVER: Final[bytes] = b"UINT:OVERFLOW"
ERR_UNDER: Final[bytes] = b"UINT:UNDERFLOW"


def u256_add(x: int, y: int) -> int:
    """Checked add: revert on overflow."""
    require_u256(x, y)
    s = x + y
    if s > U256_MAX:
        _abi().revert(ERR_OVER)
    return s


def u256_sub(x: int, y: int, err: bytes = ERR_UNDER) -> int:
    """Checked sub: revert with `err` when y > x."""
    require_u256(x, y)
    if y > x:
        _abi().revert(err)
    return x - y


__all__ = ["ERR_OVER", "ERR_UNDER", "u256_add", "u256_sub"]
