"""
execution.state.journal — journaling writes, checkpoints, revert/commit.

This module provides a deterministic, in-memory write journal layered over an
accounts mapping, a per-account storage mapping and an event log. It supports
nested checkpoints via a stack of overlays. Writes go to the top overlay; reads
consult overlays from top → base. `commit()` merges the top overlay into the
next layer (or the base state if it is the last layer). `revert()` discards
the top overlay.

With no checkpoint open, writes go straight to the base state.

Key properties
--------------
- Pure Python, no I/O; safe for unit tests and simulations.
- Copy-on-write for accounts (Account objects are copied into overlays).
- Storage overlay per (address, key) with explicit deletion markers.
- Events staged per layer, so a reverted call leaves no logs behind.
- Nested checkpoints (begin/commit/revert) with O(changes) merge cost.

Intended usage
--------------
    j = Journal(accounts, storage, logs)
    j.begin()                       # start a checkpoint
    j.account_for_write(addr).increment_nonce()
    j.storage_set(addr, key, b"value")
    j.commit()                      # apply to parent/base
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, MutableMapping, Optional

from ..types.events import LogEvent
from .accounts import Account

StorageMap = MutableMapping[bytes, Dict[bytes, bytes]]


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


# =============================================================================
# Overlay model
# =============================================================================


@dataclass
class _Overlay:
    """
    A single journal layer.

    - `accounts`: copies of Account objects modified/created in this layer.
    - `storage`: staged storage changes. `None` means deletion for that key.
    - `logs`: events emitted while this layer was on top.
    """

    accounts: Dict[bytes, Account] = field(default_factory=dict)
    storage: Dict[bytes, Dict[bytes, Optional[bytes]]] = field(default_factory=dict)
    logs: List[LogEvent] = field(default_factory=list)

    def storage_set_local(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        self.storage.setdefault(addr, {})[key] = value


# =============================================================================
# Journal
# =============================================================================


class Journal:
    """
    A copy-on-write write journal with nested checkpoints.

    Parameters
    ----------
    accounts : MutableMapping[bytes, Account]
        The base (persisted) account mapping.
    storage : MutableMapping[bytes, Dict[bytes, bytes]]
        The base storage, address → {key: value}.
    logs : List[LogEvent]
        The base (committed) event log.
    """

    def __init__(
        self,
        accounts: MutableMapping[bytes, Account],
        storage: StorageMap,
        logs: List[LogEvent],
    ) -> None:
        self._base_accounts = accounts
        self._base_storage = storage
        self._base_logs = logs
        self._layers: List[_Overlay] = []

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints."""
        return len(self._layers)

    def begin(self) -> int:
        """Start a new checkpoint. Returns the new depth marker (int)."""
        self._layers.append(_Overlay())
        return len(self._layers)

    def commit(self) -> None:
        """
        Commit the top overlay into its parent, or into the base state if it
        is the outermost checkpoint.
        """
        if not self._layers:
            raise RuntimeError("commit without an open checkpoint")
        top = self._layers.pop()
        if self._layers:
            self._merge_layers(self._layers[-1], top)
        else:
            self._apply_to_base(top)

    def revert(self) -> None:
        """Discard the top overlay."""
        if not self._layers:
            raise RuntimeError("revert without an open checkpoint")
        self._layers.pop()

    def revert_to(self, marker: int) -> None:
        """Revert repeatedly until the current depth equals `marker - 1`."""
        if marker < 1:
            raise ValueError("marker must be >= 1")
        while len(self._layers) >= marker:
            self.revert()

    # --------------------------------------------------------------------- #
    # Account API
    # --------------------------------------------------------------------- #

    def get_account(self, address: bytes | bytearray | memoryview) -> Optional[Account]:
        """Readonly lookup (do not mutate the returned object)."""
        addr = _b(address, name="address")
        for layer in reversed(self._layers):
            acc = layer.accounts.get(addr)
            if acc is not None:
                return acc
        return self._base_accounts.get(addr)

    def account_for_write(self, address: bytes | bytearray | memoryview) -> Account:
        """
        Fetch an Account suitable for **mutation**. If present in a lower layer
        or the base, a copy is promoted to the top; if absent anywhere, a fresh
        zeroed account is created.
        """
        addr = _b(address, name="address")
        if not self._layers:
            acc = self._base_accounts.get(addr)
            if acc is None:
                acc = Account()
                self._base_accounts[addr] = acc
            return acc

        top = self._layers[-1]
        acc = top.accounts.get(addr)
        if acc is not None:
            return acc
        visible = self.get_account(addr)
        acc = visible.copy() if visible is not None else Account()
        top.accounts[addr] = acc
        return acc

    # --------------------------------------------------------------------- #
    # Storage API
    # --------------------------------------------------------------------- #

    def storage_get(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
    ) -> Optional[bytes]:
        """Read storage with overlay precedence. Returns None if absent."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        for layer in reversed(self._layers):
            m = layer.storage.get(addr)
            if m is not None and key_b in m:
                return m[key_b]
        return self._base_storage.get(addr, {}).get(key_b)

    def storage_set(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
        value: bytes | bytearray | memoryview,
    ) -> None:
        """Stage a storage write. Empty value is a deletion."""
        addr = _b(address, name="address")
        key_b = _b(key, name="key")
        val_b: Optional[bytes] = _b(value, name="value") or None
        if not self._layers:
            self._write_base(addr, key_b, val_b)
            return
        self._layers[-1].storage_set_local(addr, key_b, val_b)

    def storage_delete(
        self,
        address: bytes | bytearray | memoryview,
        key: bytes | bytearray | memoryview,
    ) -> None:
        self.storage_set(address, key, b"")

    # --------------------------------------------------------------------- #
    # Events
    # --------------------------------------------------------------------- #

    def emit(self, event: LogEvent) -> None:
        if not self._layers:
            self._base_logs.append(event)
        else:
            self._layers[-1].logs.append(event)

    # --------------------------------------------------------------------- #
    # Internal merge/apply
    # --------------------------------------------------------------------- #

    @staticmethod
    def _merge_layers(dst: _Overlay, src: _Overlay) -> None:
        for addr, acc in src.accounts.items():
            dst.accounts[addr] = acc
        for addr, writes in src.storage.items():
            dst.storage.setdefault(addr, {}).update(writes)
        dst.logs.extend(src.logs)

    def _write_base(self, addr: bytes, key: bytes, value: Optional[bytes]) -> None:
        if value is None:
            m = self._base_storage.get(addr)
            if m is not None:
                m.pop(key, None)
            return
        self._base_storage.setdefault(addr, {})[key] = value

    def _apply_to_base(self, layer: _Overlay) -> None:
        for addr, acc in layer.accounts.items():
            self._base_accounts[addr] = acc
        for addr, writes in layer.storage.items():
            for k, v in writes.items():
                self._write_base(addr, k, v)
        self._base_logs.extend(layer.logs)


__all__ = ["Journal"]
