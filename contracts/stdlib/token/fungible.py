# -*- coding: utf-8 -*-
"""
ERC-20 style fungible token ledger
==================================

Deterministic, float-free, storage-backed token library. Mutating helpers take
an explicit `caller` so the entry-point module decides who the caller is
(normally ``abi.caller()``); the library never reads ambient context itself.

Highlights
----------
- Storage layout using prefixes from `contracts.stdlib.token`; all state lives
  in the storage of the *executing* account, so behind a proxy the ledger is
  the proxy's.
- Events emitted via `stdlib.events`:
    - b"Transfer" {"from": bytes, "to": bytes, "value": int}
    - b"Approval" {"owner": bytes, "spender": bytes, "value": int}
- U256-checked math via `contracts.stdlib.math.safe_uint` (no silent wrap).
- Metadata is set by an initializer (`init_metadata`), never by a constructor.

Public interface
----------------
# views
name() -> str
symbol() -> str
decimals() -> int
total_supply() -> int
balance_of(addr: bytes) -> int
allowance(owner: bytes, spender: bytes) -> int

# state-changing (explicit caller)
init_metadata(name: str, symbol: str) -> None          # inside an initializer
transfer(caller, to, amount) -> bool
approve(caller, spender, amount) -> bool
transfer_from(caller, owner, to, amount) -> bool
increase_allowance(caller, spender, added) -> bool
decrease_allowance(caller, spender, subtracted) -> bool

# internals for extensions (no permission checks)
set_allowance(owner, spender, amount) -> None          # emits Approval
mint_to(to, amount) -> None                             # emits Transfer from zero
"""

from __future__ import annotations

from typing import Final

from stdlib import events, storage  # type: ignore

from ..control.initializable import only_initializing
from ..math.safe_uint import u256_add, u256_sub
from . import (
    DEFAULT_DECIMALS,
    ERR_ALLOWANCE_LOW,
    ERR_INSUFFICIENT_BALANCE,
    EVT_APPROVAL,
    EVT_TRANSFER,
    ZERO_ADDRESS,
    key_allow,
    key_balance,
    require_amount,
    require_name,
    require_nonzero,
    require_symbol,
)

# ------------------------------------------------------------------------------
# Storage keys (metadata). Values are raw bytes unless noted.
# ------------------------------------------------------------------------------

K_NAME: Final[bytes] = b"tok:meta:name"  # utf-8
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"  # utf-8
K_TOTAL: Final[bytes] = b"tok:meta:total"  # u256

# ------------------------------------------------------------------------------
# Internal IO helpers (u256 <-> storage)
# ------------------------------------------------------------------------------


def _get_u256(k: bytes) -> int:
    return storage.get_int(k)


def _set_u256(k: bytes, n: int) -> None:
    require_amount(n)
    storage.set_int(k, n)


def _get_text(k: bytes) -> str:
    v = storage.get(k)
    return v.decode("utf-8") if v else ""


# ------------------------------------------------------------------------------
# Metadata
# ------------------------------------------------------------------------------


def name() -> str:
    return _get_text(K_NAME)


def symbol() -> str:
    return _get_text(K_SYMBOL)


def decimals() -> int:
    return DEFAULT_DECIMALS


def total_supply() -> int:
    return _get_u256(K_TOTAL)


def init_metadata(name: str, symbol: str) -> None:
    """Record name and symbol. Only callable from inside an initializer."""
    only_initializing()
    require_name(name)
    require_symbol(symbol)
    storage.set(K_NAME, name.encode("utf-8"))
    storage.set(K_SYMBOL, symbol.encode("utf-8"))


# ------------------------------------------------------------------------------
# Views
# ------------------------------------------------------------------------------


def balance_of(addr: bytes) -> int:
    return _get_u256(key_balance(addr))


def allowance(owner: bytes, spender: bytes) -> int:
    return _get_u256(key_allow(owner, spender))


# ------------------------------------------------------------------------------
# Mutations (explicit caller)
# ------------------------------------------------------------------------------


def _move(sender: bytes, to: bytes, amount: int) -> None:
    require_nonzero(sender)
    require_nonzero(to)
    require_amount(amount)

    from_key = key_balance(sender)
    new_from = u256_sub(_get_u256(from_key), amount, ERR_INSUFFICIENT_BALANCE)
    _set_u256(from_key, new_from)
    to_key = key_balance(to)
    _set_u256(to_key, u256_add(_get_u256(to_key), amount))

    events.emit(EVT_TRANSFER, {"from": bytes(sender), "to": bytes(to), "value": amount})


def transfer(caller: bytes, to: bytes, amount: int) -> bool:
    _move(caller, to, amount)
    return True


def set_allowance(owner: bytes, spender: bytes, amount: int) -> None:
    """
    Set allowance(owner, spender) = amount and emit Approval. No permission
    check: callers (approve, permit) establish authority first.
    """
    require_nonzero(owner)
    require_nonzero(spender)
    require_amount(amount)
    _set_u256(key_allow(owner, spender), amount)
    events.emit(EVT_APPROVAL, {"owner": bytes(owner), "spender": bytes(spender), "value": amount})


def approve(caller: bytes, spender: bytes, amount: int) -> bool:
    set_allowance(caller, spender, amount)
    return True


def transfer_from(caller: bytes, owner: bytes, to: bytes, amount: int) -> bool:
    """
    Spender (`caller`) transfers `amount` from `owner` to `to` using allowance.
    An allowance of 2**256-1 is treated as infinite and never decremented.
    """
    require_amount(amount)
    current = allowance(owner, caller)
    if current != (1 << 256) - 1:
        _set_u256(key_allow(owner, caller), u256_sub(current, amount, ERR_ALLOWANCE_LOW))
    _move(owner, to, amount)
    return True


def increase_allowance(caller: bytes, spender: bytes, added: int) -> bool:
    set_allowance(caller, spender, u256_add(allowance(caller, spender), added))
    return True


def decrease_allowance(caller: bytes, spender: bytes, subtracted: int) -> bool:
    set_allowance(caller, spender, u256_sub(allowance(caller, spender), subtracted, ERR_ALLOWANCE_LOW))
    return True


# ------------------------------------------------------------------------------
# Supply (permission checks belong to the entry-point module)
# ------------------------------------------------------------------------------


def mint_to(to: bytes, amount: int) -> None:
    require_nonzero(to)
    require_amount(amount)
    _set_u256(K_TOTAL, u256_add(total_supply(), amount))
    to_key = key_balance(to)
    _set_u256(to_key, u256_add(_get_u256(to_key), amount))
    events.emit(EVT_TRANSFER, {"from": ZERO_ADDRESS, "to": bytes(to), "value": amount})


# Explicit public symbols
__all__ = [
    "K_NAME",
    "K_SYMBOL",
    "K_TOTAL",
    # metadata
    "name",
    "symbol",
    "decimals",
    "total_supply",
    "init_metadata",
    # views
    "balance_of",
    "allowance",
    # mutations
    "transfer",
    "approve",
    "transfer_from",
    "increase_allowance",
    "decrease_allowance",
    # internals for extensions
    "set_allowance",
    "mint_to",
]
