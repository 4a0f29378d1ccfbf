"""
Deterministic hash helpers exposed to contracts.

Surface:
    keccak256(data: bytes) -> bytes

Delegates to `execution.crypto` so contracts and off-chain tooling (signers,
slot derivation) hash identically.
"""

from __future__ import annotations

from typing import Union

from execution import crypto

BytesLike = Union[bytes, bytearray, memoryview]


def keccak256(data: BytesLike) -> bytes:
    """Return Keccak-256 digest of data as raw bytes (length 32)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"data must be bytes-like, got {type(data).__name__}")
    return crypto.keccak256(bytes(data))


__all__ = ("keccak256",)
