# -*- coding: utf-8 -*-
"""
client.py
=========

Contract handles for scripts and tests.

A `Contract` binds an address on a `Chain` to a default sender, so calls read
like the ABI they target:

    token = Contract(chain, proxy_address, sender=alice)
    token.transact("transfer", bob, 100)
    assert token.call("balanceOf", bob) == 100

    token.connect(bob).transact("approve", alice, 5)
    v2 = token.attach(other_address)       # same sender, another address

`call` evaluates against current state and discards any writes; `transact`
sends a transaction and returns its `Receipt`. Failures surface as the typed
`execution.errors` classes.
"""
from __future__ import annotations

from typing import Any, Optional

from execution.crypto import ZERO_ADDRESS
from execution.runtime.calldata import encode_call
from execution.runtime.host import Chain
from execution.types.result import Receipt


class Contract:
    def __init__(self, chain: Chain, address: bytes, *, sender: Optional[bytes] = None, name: str = "") -> None:
        self.chain = chain
        self.address = bytes(address)
        self.sender = bytes(sender) if sender is not None else None
        self.name = name

    def __repr__(self) -> str:
        label = self.name or "Contract"
        return f"<{label} 0x{self.address.hex()}>"

    def call(self, fn: str, *args: Any) -> Any:
        """Read-only evaluation of `fn(*args)` from the bound sender."""
        sender = self.sender if self.sender is not None else ZERO_ADDRESS
        return self.chain.call(self.address, encode_call(fn, *args), sender=sender)

    def transact(self, fn: str, *args: Any, value: int = 0) -> Receipt:
        if self.sender is None:
            raise ValueError(f"{self!r} has no sender; use connect(sender) first")
        return self.chain.transact(self.sender, self.address, encode_call(fn, *args), value=value)

    def connect(self, sender: bytes) -> "Contract":
        """Same contract, different default sender."""
        return Contract(self.chain, self.address, sender=sender, name=self.name)

    def attach(self, address: bytes, *, name: Optional[str] = None) -> "Contract":
        """Same sender, different address (e.g. the proxy behind an implementation ABI)."""
        return Contract(self.chain, address, sender=self.sender, name=self.name if name is None else name)


__all__ = ["Contract"]
