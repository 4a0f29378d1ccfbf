# -*- coding: utf-8 -*-
"""
contracts.stdlib.token
======================

Shared constants, storage-key derivation and validators for the fungible
token library (`fungible`) and its signature-based approval extension
(`permit`).

Storage layout
--------------
All token keys live under the ASCII ``b"tok:"`` namespace, so they can never
collide with the proxy's 32-byte EIP-1967 slots or the ``b"init:"`` and
``b"access:"`` namespaces.

- ``tok:meta:name``                       → utf-8 name
- ``tok:meta:symbol``                     → utf-8 symbol
- ``tok:meta:total``                      → u256 total supply
- ``tok:bal:<addr20>``                    → u256 balance
- ``tok:allow:<owner20>|<spender20>``     → u256 allowance
- ``tok:permit:nonce:<owner20>``          → u256 permit nonce
- ``tok:permit:name_hash`` / ``version_hash`` → 32-byte EIP-712 domain hashes
"""

from __future__ import annotations

from typing import Final


def _abi():
    from stdlib import abi  # type: ignore

    return abi


def _revert(msg: bytes) -> None:
    _abi().revert(msg)


# -----------------------------------------------------------------------------
# Public constants: storage prefixes, event names, limits, errors
# -----------------------------------------------------------------------------

META_PREFIX: Final[bytes] = b"tok:meta:"
BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"
PERMIT_PREFIX: Final[bytes] = b"tok:permit:"

EVT_TRANSFER: Final[bytes] = b"Transfer"
EVT_APPROVAL: Final[bytes] = b"Approval"

DEFAULT_DECIMALS: Final[int] = 18
ADDRESS_LEN: Final[int] = 20
ZERO_ADDRESS: Final[bytes] = b"\x00" * ADDRESS_LEN
U256_MAX: Final[int] = (1 << 256) - 1
MAX_NAME_LEN: Final[int] = 64
MAX_SYMBOL_LEN: Final[int] = 11

# Stable error tags (short, comparable, log-friendly)
ERR_BAD_ADDR: Final[bytes] = b"TOKEN:BAD_ADDR"
ERR_ZERO_ADDR: Final[bytes] = b"TOKEN:ZERO_ADDR"
ERR_BAD_AMOUNT: Final[bytes] = b"TOKEN:BAD_AMOUNT"
ERR_BAD_NAME: Final[bytes] = b"TOKEN:BAD_NAME"
ERR_BAD_SYMBOL: Final[bytes] = b"TOKEN:BAD_SYMBOL"
ERR_INSUFFICIENT_BALANCE: Final[bytes] = b"TOKEN:INSUFFICIENT_BALANCE"
ERR_ALLOWANCE_LOW: Final[bytes] = b"TOKEN:ALLOWANCE_LOW"


# -----------------------------------------------------------------------------
# Key derivation helpers (no storage I/O here)
# -----------------------------------------------------------------------------


def key_balance(addr: bytes) -> bytes:
    require_address(addr)
    return BAL_PREFIX + bytes(addr)


def key_allow(owner: bytes, spender: bytes) -> bytes:
    """
    Derive the canonical allowance key for (owner, spender).
    """
    require_address(owner)
    require_address(spender)
    return ALLOW_PREFIX + bytes(owner) + b"|" + bytes(spender)


# -----------------------------------------------------------------------------
# Validation helpers (deterministic, float-free)
# -----------------------------------------------------------------------------


def require_address(addr: bytes) -> None:
    """Ensure `addr` is a 20-byte address (zero allowed; see require_nonzero)."""
    if not isinstance(addr, (bytes, bytearray)) or len(addr) != ADDRESS_LEN:
        _revert(ERR_BAD_ADDR)


def require_nonzero(addr: bytes) -> None:
    require_address(addr)
    if bytes(addr) == ZERO_ADDRESS:
        _revert(ERR_ZERO_ADDR)


def require_amount(n: int) -> None:
    """
    Ensure `n` is an integer amount in [0, 2**256-1].
    """
    if not isinstance(n, int) or isinstance(n, bool) or n < 0 or n > U256_MAX:
        _revert(ERR_BAD_AMOUNT)


def is_printable(s: str) -> bool:
    return isinstance(s, str) and len(s) > 0 and s.isprintable()


def is_valid_name(name: str) -> bool:
    """Name must be 1..MAX_NAME_LEN printable characters."""
    return is_printable(name) and len(name) <= MAX_NAME_LEN


def is_valid_symbol(sym: str) -> bool:
    """Symbol must be 1..MAX_SYMBOL_LEN printable characters."""
    return is_printable(sym) and len(sym) <= MAX_SYMBOL_LEN


def require_name(name: str) -> None:
    if not is_valid_name(name):
        _revert(ERR_BAD_NAME)


def require_symbol(sym: str) -> None:
    if not is_valid_symbol(sym):
        _revert(ERR_BAD_SYMBOL)


# -----------------------------------------------------------------------------
# Public exports
# -----------------------------------------------------------------------------

__all__ = [
    # prefixes
    "META_PREFIX",
    "BAL_PREFIX",
    "ALLOW_PREFIX",
    "PERMIT_PREFIX",
    # events
    "EVT_TRANSFER",
    "EVT_APPROVAL",
    # defaults/limits
    "DEFAULT_DECIMALS",
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "U256_MAX",
    "MAX_NAME_LEN",
    "MAX_SYMBOL_LEN",
    # errors
    "ERR_BAD_ADDR",
    "ERR_ZERO_ADDR",
    "ERR_BAD_AMOUNT",
    "ERR_BAD_NAME",
    "ERR_BAD_SYMBOL",
    "ERR_INSUFFICIENT_BALANCE",
    "ERR_ALLOWANCE_LOW",
    # key derivation
    "key_balance",
    "key_allow",
    # validators
    "require_address",
    "require_nonzero",
    "require_amount",
    "require_name",
    "require_symbol",
    "is_printable",
    "is_valid_name",
    "is_valid_symbol",
]
