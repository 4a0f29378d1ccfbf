# -*- coding: utf-8 -*-
"""
signer.py
=========

Local secp256k1 accounts for development, and off-chain EIP-2612 signing.

Dev accounts are derived deterministically from a label, so fixtures and
rehearsal scripts get stable addresses without key files:

    alice = LocalAccount.from_label("alice")
    v, r, s = sign_permit(alice, token=proxy, chain_id=1337, name="TokenName",
                          spender=bob.address, value=500, nonce=0)

`sign_permit` builds exactly the digest the on-chain verifier recomputes
(`contracts.stdlib.token.permit`), so a signature produced here is accepted
by `permit(...)` on the token at `token` and nowhere else.

Never use derived dev keys for real funds.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from execution.crypto import SECP256K1_N, keccak256, private_key_to_address, sign_digest

from contracts.stdlib.token.permit import (
    PERMIT_VERSION,
    domain_separator_for,
    permit_struct_hash,
    typed_data_digest,
)

MAX_DEADLINE = 2**256 - 1

Signature = Tuple[int, int, int]


@dataclass(frozen=True)
class LocalAccount:
    private_key: bytes = field(repr=False)
    address: bytes = b""

    def __post_init__(self) -> None:
        if not self.address:
            object.__setattr__(self, "address", private_key_to_address(self.private_key))

    @classmethod
    def from_label(cls, label: str) -> "LocalAccount":
        """Deterministic key: keccak256("tuproxy-dev:" + label), re-hashed until in range."""
        seed = keccak256(b"tuproxy-dev:" + label.encode("utf-8"))
        while not 0 < int.from_bytes(seed, "big") < SECP256K1_N:
            seed = keccak256(seed)
        return cls(private_key=seed)

    @classmethod
    def from_hex(cls, key_hex: str) -> "LocalAccount":
        h = key_hex[2:] if key_hex.startswith(("0x", "0X")) else key_hex
        return cls(private_key=bytes.fromhex(h))

    @classmethod
    def from_env(cls, var: str = "TUPROXY_DEPLOYER_KEY", default_label: str = "deployer") -> "LocalAccount":
        key = os.getenv(var)
        if key:
            return cls.from_hex(key.strip())
        return cls.from_label(default_label)

    @property
    def address_hex(self) -> str:
        return "0x" + self.address.hex()

    def sign_digest(self, digest: bytes) -> Signature:
        return sign_digest(digest, self.private_key)


def permit_digest(
    *,
    token: bytes,
    chain_id: int,
    name: str,
    owner: bytes,
    spender: bytes,
    value: int,
    nonce: int,
    deadline: int = MAX_DEADLINE,
    version: str = PERMIT_VERSION,
) -> bytes:
    ds = domain_separator_for(
        keccak256(name.encode("utf-8")),
        keccak256(version.encode("utf-8")),
        chain_id,
        token,
    )
    return typed_data_digest(ds, permit_struct_hash(owner, spender, value, nonce, deadline))


def sign_permit(
    account: LocalAccount,
    *,
    token: bytes,
    chain_id: int,
    name: str,
    spender: bytes,
    value: int,
    nonce: int,
    deadline: Optional[int] = None,
) -> Signature:
    """
    Sign a Permit(owner=account, spender, value, nonce, deadline) for the
    token at `token`. `deadline` defaults to "never expires".
    """
    return account.sign_digest(
        permit_digest(
            token=token,
            chain_id=chain_id,
            name=name,
            owner=account.address,
            spender=spender,
            value=value,
            nonce=nonce,
            deadline=MAX_DEADLINE if deadline is None else deadline,
        )
    )


def split_signature(sig: bytes) -> Signature:
    """
    65-byte r||s||v signature → (v, r, s). v may be given as 0/1 or 27/28.
    """
    if len(sig) != 65:
        raise ValueError(f"signature must be 65 bytes, got {len(sig)}")
    r = int.from_bytes(sig[:32], "big")
    s = int.from_bytes(sig[32:64], "big")
    v = sig[64]
    if v < 27:
        v += 27
    return v, r, s


def join_signature(v: int, r: int, s: int) -> bytes:
    return r.to_bytes(32, "big") + s.to_bytes(32, "big") + bytes([v])


__all__ = [
    "MAX_DEADLINE",
    "LocalAccount",
    "permit_digest",
    "sign_permit",
    "split_signature",
    "join_signature",
]
