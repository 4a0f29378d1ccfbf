"""
execution.crypto — Keccak-256 and secp256k1 signature recovery.

These are the host's "precompiles": pure functions with no access to chain
state, shared by the contract-facing facade (`stdlib.hash`, `stdlib.ecdsa`)
and by off-chain tooling (`contracts.tools.signer`).

- keccak256 is Ethereum's Keccak (pre-NIST padding), provided by PyCryptodome.
- ECDSA over secp256k1 comes from py_ecc. Recovery is strict: only v in
  {27, 28}, 0 < r < n and low-s signatures (s <= n/2) are accepted, so every
  authorization has exactly one valid encoding.
- Addresses are the last 20 bytes of keccak256(X || Y) of the public key.
"""

from __future__ import annotations

from typing import Optional, Tuple

from Crypto.Hash import keccak as _keccak
from py_ecc.secp256k1 import N as SECP256K1_N
from py_ecc.secp256k1 import ecdsa_raw_recover, ecdsa_raw_sign, privtopub

ADDRESS_LENGTH = 20
ZERO_ADDRESS = b"\x00" * ADDRESS_LENGTH

_HALF_N = SECP256K1_N // 2


def keccak256(data: bytes) -> bytes:
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"keccak256 expects bytes-like, got {type(data).__name__}")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


# ------------------------------ addresses ------------------------------------


def public_key_to_address(pub: Tuple[int, int]) -> bytes:
    x, y = pub
    return keccak256(int(x).to_bytes(32, "big") + int(y).to_bytes(32, "big"))[-ADDRESS_LENGTH:]


def private_key_to_address(private_key: bytes) -> bytes:
    return public_key_to_address(privtopub(_check_private_key(private_key)))


def _check_private_key(private_key: bytes) -> bytes:
    if not isinstance(private_key, (bytes, bytearray)) or len(private_key) != 32:
        raise ValueError("private key must be 32 bytes")
    k = int.from_bytes(private_key, "big")
    if not 0 < k < SECP256K1_N:
        raise ValueError("private key out of range")
    return bytes(private_key)


# ------------------------------ signatures -----------------------------------


def sign_digest(digest: bytes, private_key: bytes) -> Tuple[int, int, int]:
    """
    Sign a 32-byte digest; returns (v, r, s) with v in {27, 28} and low s.
    """
    if len(digest) != 32:
        raise ValueError("digest must be 32 bytes")
    v, r, s = ecdsa_raw_sign(bytes(digest), _check_private_key(private_key))
    return int(v), int(r), int(s)


def ecrecover(digest: bytes, v: int, r: int, s: int) -> Optional[bytes]:
    """
    Recover the signer address of `digest`, or None if the signature is
    malformed or does not correspond to a curve point.
    """
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != 32:
        return None
    if v not in (27, 28):
        return None
    if not (0 < r < SECP256K1_N) or not (0 < s <= _HALF_N):
        return None
    try:
        pub = ecdsa_raw_recover(bytes(digest), (v, r, s))
    except ValueError:
        return None
    # Older py_ecc releases signal failure with a falsy result instead of raising.
    if not pub:
        return None
    return public_key_to_address(pub)


__all__ = [
    "ADDRESS_LENGTH",
    "ZERO_ADDRESS",
    "SECP256K1_N",
    "keccak256",
    "public_key_to_address",
    "private_key_to_address",
    "sign_digest",
    "ecrecover",
]
