# -*- coding: utf-8 -*-
"""
Signature-based approvals (EIP-2612 permit)
===========================================

Holders sign a typed "permit" message off-chain; *any* relayer can submit it
on-chain to set an allowance without the holder sending a separate `approve`
transaction.

Signing scheme
--------------
EIP-712 typed data over secp256k1:

    domainSeparator = keccak256(
        DOMAIN_TYPEHASH || keccak256(name) || keccak256("1")
        || u256(chainId) || pad32(verifyingContract))
    structHash = keccak256(
        PERMIT_TYPEHASH || pad32(owner) || pad32(spender)
        || u256(value) || u256(nonce) || u256(deadline))
    digest = keccak256(0x19 0x01 || domainSeparator || structHash)

`verifyingContract` is the executing identity (`abi.this()`), i.e. the proxy
when the token runs behind one, so signatures survive upgrades but never
transfer between deployments. The hashed name and version are stored once by
`init_permit` (an initializer-only helper).

Checks (in order)
-----------------
1. ``block_timestamp > deadline``          → ``PERMIT:EXPIRED``
2. digest built with the owner's *current* nonce
3. recovered signer != owner              → ``PERMIT:REPLAYED`` if the same
   signature recovers to owner for ``nonce - 1``, else ``PERMIT:INVALID_SIGNATURE``

On success the nonce is consumed, allowance(owner, spender) = value and an
``Approval`` event is emitted. On failure nothing is written.

State
-----
- ``tok:permit:nonce:<owner>``   u256, starts at 0
- ``tok:permit:name_hash``       keccak256(name)
- ``tok:permit:version_hash``    keccak256(version)

The pure helpers (`domain_separator_for`, `permit_struct_hash`,
`typed_data_digest`) need no running contract and are shared with off-chain
signers.
"""

from __future__ import annotations

from typing import Final, Optional

from stdlib import abi, ecdsa, storage  # type: ignore
from stdlib.hash import keccak256  # type: ignore

from ..control.initializable import only_initializing
from . import PERMIT_PREFIX, U256_MAX, require_address, require_amount
from .fungible import set_allowance

# ------------------------------------------------------------------------------
# Constants & storage keys
# ------------------------------------------------------------------------------

PERMIT_VERSION: Final[str] = "1"

DOMAIN_TYPEHASH: Final[bytes] = keccak256(
    b"EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)
PERMIT_TYPEHASH: Final[bytes] = keccak256(
    b"Permit(address owner,address spender,uint256 value,uint256 nonce,uint256 deadline)"
)

K_NONCE_PREFIX: Final[bytes] = PERMIT_PREFIX + b"nonce:"  # + owner
K_NAME_HASH: Final[bytes] = PERMIT_PREFIX + b"name_hash"
K_VERSION_HASH: Final[bytes] = PERMIT_PREFIX + b"version_hash"

ERR_EXPIRED: Final[bytes] = b"PERMIT:EXPIRED"
ERR_INVALID_SIGNATURE: Final[bytes] = b"PERMIT:INVALID_SIGNATURE"
ERR_REPLAYED: Final[bytes] = b"PERMIT:REPLAYED"


# ------------------------------------------------------------------------------
# Encoding helpers (ABI words)
# ------------------------------------------------------------------------------


def _u256(n: int) -> bytes:
    if not isinstance(n, int) or n < 0 or n > U256_MAX:
        raise ValueError(f"value out of u256 range: {n!r}")
    return n.to_bytes(32, "big")


def _addr_word(a: bytes) -> bytes:
    if not isinstance(a, (bytes, bytearray)) or len(a) != 20:
        raise ValueError("address must be 20 bytes")
    return bytes(12) + bytes(a)


# ------------------------------------------------------------------------------
# Pure EIP-712 helpers
# ------------------------------------------------------------------------------


def domain_separator_for(
    name_hash: bytes,
    version_hash: bytes,
    chain_id: int,
    verifying_contract: bytes,
) -> bytes:
    return keccak256(
        DOMAIN_TYPEHASH
        + bytes(name_hash)
        + bytes(version_hash)
        + _u256(chain_id)
        + _addr_word(verifying_contract)
    )


def permit_struct_hash(owner: bytes, spender: bytes, value: int, nonce: int, deadline: int) -> bytes:
    return keccak256(
        PERMIT_TYPEHASH
        + _addr_word(owner)
        + _addr_word(spender)
        + _u256(value)
        + _u256(nonce)
        + _u256(deadline)
    )


def typed_data_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    return keccak256(b"\x19\x01" + bytes(domain_separator) + bytes(struct_hash))


# ------------------------------------------------------------------------------
# Domain (contract side)
# ------------------------------------------------------------------------------


def init_permit(name: str) -> None:
    """Store the hashed EIP-712 name/version. Only callable during setup."""
    only_initializing()
    storage.set(K_NAME_HASH, keccak256(name.encode("utf-8")))
    storage.set(K_VERSION_HASH, keccak256(PERMIT_VERSION.encode("utf-8")))


def domain_separator() -> bytes:
    """Domain separator for the executing contract on the current chain."""
    return domain_separator_for(
        storage.get(K_NAME_HASH) or bytes(32),
        storage.get(K_VERSION_HASH) or bytes(32),
        abi.chain_id(),
        abi.this(),
    )


# ------------------------------------------------------------------------------
# Nonces
# ------------------------------------------------------------------------------


def _k_nonce(owner: bytes) -> bytes:
    require_address(owner)
    return K_NONCE_PREFIX + bytes(owner)


def nonces(owner: bytes) -> int:
    """Current (unused) permit nonce for `owner`."""
    return storage.get_int(_k_nonce(owner))


# ------------------------------------------------------------------------------
# Permit execution
# ------------------------------------------------------------------------------


def _signer_for_nonce(
    owner: bytes, spender: bytes, value: int, nonce: int, deadline: int, v: int, r: int, s: int
) -> Optional[bytes]:
    digest = typed_data_digest(domain_separator(), permit_struct_hash(owner, spender, value, nonce, deadline))
    return ecdsa.recover(digest, v, r, s)


def permit(owner: bytes, spender: bytes, value: int, deadline: int, v: int, r: int, s: int) -> None:
    """
    Apply a signed permit; see the module docstring for the check order.
    """
    require_address(owner)
    require_address(spender)
    require_amount(value)
    require_amount(deadline)

    if abi.block_timestamp() > deadline:
        abi.revert(ERR_EXPIRED)

    nonce = nonces(owner)
    if _signer_for_nonce(owner, spender, value, nonce, deadline, v, r, s) != bytes(owner):
        if nonce > 0 and _signer_for_nonce(owner, spender, value, nonce - 1, deadline, v, r, s) == bytes(owner):
            abi.revert(ERR_REPLAYED)
        abi.revert(ERR_INVALID_SIGNATURE)

    storage.set_int(_k_nonce(owner), nonce + 1)
    set_allowance(owner, spender, value)


__all__ = [
    "PERMIT_VERSION",
    "DOMAIN_TYPEHASH",
    "PERMIT_TYPEHASH",
    "K_NONCE_PREFIX",
    "K_NAME_HASH",
    "K_VERSION_HASH",
    "domain_separator_for",
    "permit_struct_hash",
    "typed_data_digest",
    "init_permit",
    "domain_separator",
    "nonces",
    "permit",
]
