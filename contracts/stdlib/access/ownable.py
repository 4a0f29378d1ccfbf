# -*- coding: utf-8 -*-
"""
contracts.stdlib.access.ownable
================================

Single-owner access control for tuproxy contracts.

This module provides a focused owner storage and control surface:
- read the current owner (`get_owner`)
- set the first owner from a constructor (`init_owner`)
- set the first owner from a proxied setup call (`init_owner_upgradeable`)
- check that a caller is the owner (`require_owner`)
- transfer ownership to a new account (`transfer_ownership`)
- renounce ownership (clear owner) (`renounce_ownership`)

Only the sanctioned stdlib modules (`storage`, `events`, `abi`) are used.

Conventions
-----------
- Addresses are 20-byte `bytes`; the all-zero address means "no owner".
- The owner value is stored at ``OWNER_KEY = b"access:owner"``.
- Events:
    - "OwnershipTransferred" args: {"previousOwner": bytes, "newOwner": bytes}

Typical usage
-------------
    from contracts.stdlib.access.ownable import init_owner_upgradeable, require_owner

    @initializer
    def initialize() -> None:
        init_owner_upgradeable(abi.caller())

    def mint(to: bytes, amount: int) -> None:
        require_owner(abi.caller())
        ...

Safety notes
------------
- `init_owner_upgradeable` only runs inside an initializer; a proxied contract
  cannot be re-owned through it later.
- `transfer_ownership` rejects the zero address; use `renounce_ownership`
  explicitly to leave the contract without an owner.
"""
from __future__ import annotations

from typing import Final

from ..control.initializable import only_initializing

__all__ = [
    "OWNER_KEY",
    "ZERO_ADDRESS",
    "get_owner",
    "init_owner",
    "init_owner_upgradeable",
    "require_owner",
    "transfer_ownership",
    "renounce_ownership",
]

OWNER_KEY: Final[bytes] = b"access:owner"
ZERO_ADDRESS: Final[bytes] = b"\x00" * 20

ERR_NOT_OWNER: Final[bytes] = b"ACCESS:NOT_OWNER"
ERR_ZERO_OWNER: Final[bytes] = b"ACCESS:ZERO_OWNER"


# --- Internal stdlib accessors (lazy to satisfy VM import guard) --------------


def _std_storage():
    from stdlib import storage  # type: ignore

    return storage


def _std_events():
    from stdlib import events  # type: ignore

    return events


def _std_abi():
    from stdlib import abi  # type: ignore

    return abi


# --- Owner primitives ---------------------------------------------------------


def get_owner() -> bytes:
    """
    Return the current owner address (ZERO_ADDRESS if none).
    """
    v = _std_storage().get(OWNER_KEY)
    return v if v else ZERO_ADDRESS


def _set_owner(new_owner: bytes) -> None:
    previous = get_owner()
    if new_owner == ZERO_ADDRESS:
        _std_storage().delete(OWNER_KEY)
    else:
        _std_storage().set(OWNER_KEY, new_owner)
    _std_events().emit(b"OwnershipTransferred", {"previousOwner": previous, "newOwner": new_owner})


def init_owner(owner: bytes) -> None:
    """
    Constructor-time setup: make `owner` the first owner. Does not overwrite
    an existing owner.
    """
    if get_owner() == ZERO_ADDRESS:
        _set_owner(bytes(owner))


def init_owner_upgradeable(owner: bytes) -> None:
    """Initializer-time setup for proxied contracts."""
    only_initializing()
    _set_owner(bytes(owner))


def require_owner(caller: bytes) -> None:
    """
    Revert unless `caller` equals the current owner.
    """
    owner = get_owner()
    if owner == ZERO_ADDRESS or owner != caller:
        _std_abi().revert(ERR_NOT_OWNER)


def transfer_ownership(caller: bytes, new_owner: bytes) -> None:
    """
    Owner-only: transfer ownership to `new_owner` (must be non-zero).
    """
    require_owner(caller)
    if not isinstance(new_owner, (bytes, bytearray)) or len(new_owner) != 20 or new_owner == ZERO_ADDRESS:
        _std_abi().revert(ERR_ZERO_OWNER)
    _set_owner(bytes(new_owner))


def renounce_ownership(caller: bytes) -> None:
    """
    Owner-only: leave the contract without an owner. Every owner-gated entry
    point fails from then on.
    """
    require_owner(caller)
    _set_owner(ZERO_ADDRESS)
