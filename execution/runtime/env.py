"""
execution.runtime.env — BlockEnv and call Frames seen by contracts.

These lightweight environments are what the contract-facing facade
(`stdlib.abi`) reads from. They contain only pure data (ints/bytes) and
perform strict validation.

Design notes
------------
- Addresses are raw 20-byte values; hex strings (with or without "0x") are
  accepted by `to_bytes` and normalized.
- `chain_id` is carried in BlockEnv to allow domain separation inside
  contracts (EIP-712 permit domains).
- A Frame distinguishes the *identity* a call executes as (`address`, whose
  storage is read and written) from the *code* it runs (`code_address`). The
  two differ exactly under delegation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Union


class ContextError(Exception):
    """Validation or coercion failure for BlockEnv/Frame."""


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: Union[bytes, bytearray, memoryview, str]) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise ContextError(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise ContextError(f"invalid hex string: {value!r}") from e
    raise ContextError(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContextError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ContextError(f"{name} must be non-negative, got {v}")
    return v


@dataclass(frozen=True)
class BlockEnv:
    """
    Deterministic per-block environment.

    Fields
    ------
    height:     Block height (0-based).
    timestamp:  Block timestamp (seconds since epoch).
    chain_id:   Integer chain identifier.
    """
    height: int
    timestamp: int
    chain_id: int

    def __post_init__(self) -> None:
        _require_non_negative_int("height", self.height)
        _require_non_negative_int("timestamp", self.timestamp)
        _require_non_negative_int("chain_id", self.chain_id)

    def next(self, block_time: int) -> "BlockEnv":
        return BlockEnv(
            height=self.height + 1,
            timestamp=self.timestamp + block_time,
            chain_id=self.chain_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Frame:
    """
    One level of the call stack.

    Fields
    ------
    address:       Identity the code executes as; owner of the storage touched.
    code_address:  Account whose code is running (== address unless delegated).
    caller:        Immediate caller (msg.sender).
    origin:        Externally owned account that signed the transaction.
    value:         Native value attached to the call (msg.value).
    depth:         0 for the outermost call.
    """
    address: bytes
    code_address: bytes
    caller: bytes
    origin: bytes
    value: int = 0
    depth: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", to_bytes(self.address))
        object.__setattr__(self, "code_address", to_bytes(self.code_address))
        object.__setattr__(self, "caller", to_bytes(self.caller))
        object.__setattr__(self, "origin", to_bytes(self.origin))
        _require_non_negative_int("value", self.value)
        _require_non_negative_int("depth", self.depth)

    @property
    def is_delegated(self) -> bool:
        return self.address != self.code_address

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": to_hex(self.address),
            "code_address": to_hex(self.code_address),
            "caller": to_hex(self.caller),
            "origin": to_hex(self.origin),
            "value": self.value,
            "depth": self.depth,
        }


__all__ = [
    "ContextError",
    "to_bytes",
    "to_hex",
    "BlockEnv",
    "Frame",
]
