"""
execution.types.events — event/log record type for the contract host.

`LogEvent` is the compact, deterministic container the host records whenever a
contract calls ``stdlib.events.emit(name, args)``.

Conventions
-----------
* `address` is the *emitting identity*: under delegation this is the proxy's
  address, not the implementation's.
* `name` is the event tag as bytes (e.g. ``b"Upgraded"``).
* `args` is a plain mapping of field name → value (bytes/int/bool/str).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


def _bytes_to_hex(b: bytes) -> str:
    return "0x" + b.hex()


@dataclass(frozen=True)
class LogEvent:
    """
    A single event emitted during transaction execution.

    Attributes:
        address: bytes — emitter address (20 bytes)
        name:    bytes — event tag
        args:    dict  — event payload
    """

    address: bytes
    name: bytes
    args: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.address, (bytes, bytearray)) or len(self.address) == 0:
            raise ValueError("address must be non-empty bytes")
        name = self.name.encode("utf-8") if isinstance(self.name, str) else bytes(self.name)
        object.__setattr__(self, "address", bytes(self.address))
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "args", dict(self.args))

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly form; bytes values are rendered as 0x-hex.
        """
        return {
            "address": _bytes_to_hex(self.address),
            "name": self.name.decode("utf-8", errors="replace"),
            "args": {
                str(k): (_bytes_to_hex(v) if isinstance(v, (bytes, bytearray)) else v)
                for k, v in self.args.items()
            },
        }


__all__ = ["LogEvent"]
