# -*- coding: utf-8 -*-
"""
contracts.stdlib.upgrade
========================

Storage slots and mutators for **transparent upgradeable proxies**.

The proxy keeps exactly two pieces of its own state, each at a fixed 32-byte
slot derived as in EIP-1967 so it can never collide with the ASCII-prefixed
namespaces used by implementation code:

    IMPLEMENTATION_SLOT = keccak256("eip1967.proxy.implementation") - 1
    ADMIN_SLOT          = keccak256("eip1967.proxy.admin") - 1

Off-chain tooling reads these slots directly (`Chain.storage_at`) to find a
proxy's implementation and admin without going through the admin gate.

This module **does not** perform authorization. The proxy's dispatcher
decides who may reach the mutators below.

Events
------
- ``b"Upgraded"``      {"implementation": bytes}
- ``b"AdminChanged"``  {"previousAdmin": bytes, "newAdmin": bytes}

Reverts
-------
- ``b"PROXY:NOT_CONTRACT"``  new implementation has no code
- ``b"PROXY:ZERO_ADMIN"``    new admin is the zero address
"""
from __future__ import annotations

from typing import Any, Final

from stdlib import abi, events  # type: ignore
from stdlib import hash as _hash  # type: ignore
from stdlib import storage  # type: ignore

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ZERO_ADDRESS: Final[bytes] = b"\x00" * 20


def erc1967_slot(tag: bytes) -> bytes:
    """keccak256(tag) - 1 as a 32-byte big-endian slot key."""
    n = int.from_bytes(_hash.keccak256(tag), "big") - 1
    return n.to_bytes(32, "big")


IMPLEMENTATION_SLOT: Final[bytes] = erc1967_slot(b"eip1967.proxy.implementation")
ADMIN_SLOT: Final[bytes] = erc1967_slot(b"eip1967.proxy.admin")
RESERVED_SLOTS: Final[tuple] = (IMPLEMENTATION_SLOT, ADMIN_SLOT)

ERR_NOT_CONTRACT: Final[bytes] = b"PROXY:NOT_CONTRACT"
ERR_ZERO_ADMIN: Final[bytes] = b"PROXY:ZERO_ADMIN"


# ---------------------------------------------------------------------------
# Implementation pointer
# ---------------------------------------------------------------------------


def get_implementation() -> bytes:
    return storage.get(IMPLEMENTATION_SLOT) or ZERO_ADDRESS


def set_implementation(new_impl: bytes) -> None:
    """
    Point the proxy at `new_impl`, which must be deployed code. Re-pointing
    at the current implementation is allowed and still emits `Upgraded`.
    """
    if not isinstance(new_impl, (bytes, bytearray)) or len(new_impl) != 20:
        abi.revert(ERR_NOT_CONTRACT)
    if not abi.is_contract(bytes(new_impl)):
        abi.revert(ERR_NOT_CONTRACT)
    storage.set(IMPLEMENTATION_SLOT, bytes(new_impl))
    events.emit(b"Upgraded", {"implementation": bytes(new_impl)})


def upgrade_to_and_call(new_impl: bytes, data: bytes = b"") -> Any:
    """
    Swap the implementation, then (if `data` is non-empty) delegate `data` to
    it in the same call. A failing setup call reverts the swap with it.
    """
    set_implementation(new_impl)
    if data:
        return abi.delegatecall(bytes(new_impl), bytes(data))
    return None


# ---------------------------------------------------------------------------
# Admin pointer
# ---------------------------------------------------------------------------


def get_admin() -> bytes:
    return storage.get(ADMIN_SLOT) or ZERO_ADDRESS


def change_admin(new_admin: bytes) -> None:
    if not isinstance(new_admin, (bytes, bytearray)) or len(new_admin) != 20 or bytes(new_admin) == ZERO_ADDRESS:
        abi.revert(ERR_ZERO_ADMIN)
    previous = get_admin()
    storage.set(ADMIN_SLOT, bytes(new_admin))
    events.emit(b"AdminChanged", {"previousAdmin": previous, "newAdmin": bytes(new_admin)})


__all__ = [
    "ZERO_ADDRESS",
    "IMPLEMENTATION_SLOT",
    "ADMIN_SLOT",
    "RESERVED_SLOTS",
    "erc1967_slot",
    "get_implementation",
    "set_implementation",
    "upgrade_to_and_call",
    "get_admin",
    "change_admin",
]
