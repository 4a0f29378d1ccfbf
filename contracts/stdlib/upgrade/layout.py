# -*- coding: utf-8 -*-
"""
contracts.stdlib.upgrade.layout
===============================

Explicit, versioned storage-layout declarations for proxied implementations.

Upgrading swaps the *code* behind a proxy but keeps its *storage*, so every
implementation version must agree with its predecessor about what lives
where. Each implementation module declares its layout as a set of storage
**regions**: ASCII key prefixes mapped to the encoding of the values stored
under them.

    STORAGE_LAYOUT = StorageLayout(
        name="TokenV2",
        regions={b"tok:bal:": "u256", b"tok:permit:nonce:": "u256", ...},
    )

Rules checked by `validate_layout` / `validate_upgrade`:

1. No region may overlap the proxy's reserved 32-byte slots.
2. An upgrade keeps every region of the previous layout with an identical
   encoding, unless the new layout names the prefix in ``migrates`` (its
   setup routine rewrites that region inside ``upgradeAndCall``).
3. New regions may be added freely.

Violations raise `LayoutError`. These checks run off-chain, in the deploy and
upgrade tooling, before any transaction is sent.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

ENCODINGS = frozenset({"u8", "u256", "address", "bytes32", "utf8", "flag"})


class LayoutError(ValueError):
    """A storage layout is malformed or incompatible with its predecessor."""

    def __init__(self, message: str, *, problems: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [message])


@dataclass(frozen=True)
class StorageLayout:
    name: str
    regions: Mapping[bytes, str] = field(default_factory=dict)
    migrates: Tuple[bytes, ...] = ()

    def __post_init__(self) -> None:
        regions: Dict[bytes, str] = {}
        for prefix, encoding in dict(self.regions).items():
            if not isinstance(prefix, (bytes, bytearray)) or not prefix:
                raise LayoutError(f"{self.name}: region prefix must be non-empty bytes")
            if encoding not in ENCODINGS:
                raise LayoutError(f"{self.name}: unknown encoding {encoding!r} for {bytes(prefix)!r}")
            regions[bytes(prefix)] = encoding
        object.__setattr__(self, "regions", regions)
        object.__setattr__(self, "migrates", tuple(bytes(p) for p in self.migrates))

    def region_for(self, key: bytes) -> Optional[bytes]:
        """Longest declared prefix covering `key`, or None."""
        best: Optional[bytes] = None
        for prefix in self.regions:
            if key.startswith(prefix) and (best is None or len(prefix) > len(best)):
                best = prefix
        return best

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "regions": {p.decode("ascii", errors="replace"): enc for p, enc in sorted(self.regions.items())},
            "migrates": [p.decode("ascii", errors="replace") for p in self.migrates],
        }


def _overlaps(a: bytes, b: bytes) -> bool:
    return a.startswith(b) or b.startswith(a)


def validate_layout(layout: StorageLayout, reserved: Iterable[bytes] = ()) -> None:
    """Reject regions that overlap any reserved slot key."""
    if not reserved:
        from . import RESERVED_SLOTS

        reserved = RESERVED_SLOTS
    problems = [
        f"region {prefix!r} overlaps reserved slot 0x{slot.hex()}"
        for prefix in layout.regions
        for slot in reserved
        if _overlaps(prefix, slot)
    ]
    if problems:
        raise LayoutError(f"{layout.name}: layout collides with proxy slots", problems=problems)


def validate_upgrade(old: StorageLayout, new: StorageLayout) -> None:
    """Check that `new` can take over storage written under `old`."""
    validate_layout(new)
    problems: List[str] = []
    for prefix, encoding in old.regions.items():
        if prefix in new.migrates:
            continue
        if prefix not in new.regions:
            problems.append(f"region {prefix!r} removed")
        elif new.regions[prefix] != encoding:
            problems.append(f"region {prefix!r} changed encoding {encoding} -> {new.regions[prefix]}")
    if problems:
        raise LayoutError(f"{old.name} -> {new.name}: incompatible storage layout", problems=problems)


__all__ = ["ENCODINGS", "LayoutError", "StorageLayout", "validate_layout", "validate_upgrade"]
