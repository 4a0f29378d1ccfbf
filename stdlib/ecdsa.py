"""
secp256k1 signature recovery for contracts.

    recover(digest, v, r, s) -> Optional[bytes]

Returns the 20-byte signer address, or None for malformed, high-s or
otherwise unrecoverable signatures. Contracts compare the result with the
expected signer; they never see a partial or "zero" address.
"""

from __future__ import annotations

from typing import Optional

from execution import crypto


def recover(digest: bytes, v: int, r: int, s: int) -> Optional[bytes]:
    if not all(isinstance(x, int) and not isinstance(x, bool) for x in (v, r, s)):
        return None
    return crypto.ecrecover(bytes(digest), v, r, s)


__all__ = ("recover",)
