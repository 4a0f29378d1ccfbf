"""
Contract-facing key/value storage.

Surface:
    get(key) -> Optional[bytes]
    set(key, value) -> None           # empty value deletes
    delete(key) -> None
    exists(key) -> bool
    get_int(key) -> int               # big-endian unsigned, 0 when unset
    set_int(key, value) -> None       # 0 deletes the key

Keys and values are bytes. Length caps come from the host configuration.
"""

from __future__ import annotations

from typing import Optional

from execution.runtime.host import active

_U256_MAX = (1 << 256) - 1


def _ensure_bytes(name: str, value: object) -> bytes:
    if not isinstance(value, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes, got {type(value).__name__}")
    return bytes(value)


def get(key: bytes) -> Optional[bytes]:
    """Return the value for `key`, or None if not set."""
    return active().sload(_ensure_bytes("key", key))


def set(key: bytes, value: bytes) -> None:
    active().sstore(_ensure_bytes("key", key), _ensure_bytes("value", value))


def delete(key: bytes) -> None:
    active().sstore(_ensure_bytes("key", key), b"")


def exists(key: bytes) -> bool:
    return get(key) is not None


def get_int(key: bytes) -> int:
    raw = get(key)
    if not raw:
        return 0
    return int.from_bytes(raw, "big", signed=False)


def set_int(key: bytes, value: int) -> None:
    """
    Store `value` as a minimal big-endian unsigned integer. Enforces
    0 <= value <= 2^256-1.
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("set_int value must be int")
    if value < 0 or value > _U256_MAX:
        raise OverflowError("set_int out of range (must fit in 256 bits)")
    if value == 0:
        delete(key)
        return
    set(key, value.to_bytes((value.bit_length() + 7) // 8, "big"))


__all__ = ["get", "set", "delete", "exists", "get_int", "set_int"]
