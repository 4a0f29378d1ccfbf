# -*- coding: utf-8 -*-
"""
Example Contract — Upgradeable Fungible Token, version 1
--------------------------------------------------------

ERC-20 style token meant to run **behind a transparent proxy**. It has no
constructor state: the deployer initializes the proxy's storage through
`initialize(name, symbol)`, delegated by the proxy's constructor.

Views:
  - name() -> str
  - symbol() -> str
  - decimals() -> int                                  (18)
  - totalSupply() -> int
  - balanceOf(account: bytes) -> int
  - allowance(owner: bytes, spender: bytes) -> int
State-changing:
  - initialize(name: str, symbol: str) -> None         (once; caller becomes owner)
  - transfer(to: bytes, amount: int) -> bool
  - approve(spender: bytes, amount: int) -> bool
  - transferFrom(src: bytes, dst: bytes, amount: int) -> bool
  - increaseAllowance(spender: bytes, added: int) -> bool
  - decreaseAllowance(spender: bytes, subtracted: int) -> bool
  - mint(to: bytes, amount: int) -> None               (owner-only)
Ownership:
  - owner() -> bytes
  - transferOwnership(newOwner: bytes) -> None         (owner-only)
  - renounceOwnership() -> None                        (owner-only)

The bare implementation account is locked at deployment (its constructor
disables initializers), so it stays unowned with an empty name forever.
"""
from __future__ import annotations

from stdlib import abi  # VM-provided deterministic module

from contracts.stdlib.access import ownable
from contracts.stdlib.control import disable_initializers, initializer
from contracts.stdlib.token import fungible
from contracts.stdlib.upgrade.layout import StorageLayout

EXTERNAL = (
    "initialize",
    "name",
    "symbol",
    "decimals",
    "totalSupply",
    "balanceOf",
    "allowance",
    "transfer",
    "approve",
    "transferFrom",
    "increaseAllowance",
    "decreaseAllowance",
    "mint",
    "owner",
    "transferOwnership",
    "renounceOwnership",
)

STORAGE_LAYOUT = StorageLayout(
    name="TokenV1",
    regions={
        b"init:version": "u8",
        b"init:initializing": "flag",
        ownable.OWNER_KEY: "address",
        fungible.K_NAME: "utf8",
        fungible.K_SYMBOL: "utf8",
        fungible.K_TOTAL: "u256",
        b"tok:bal:": "u256",
        b"tok:allow:": "u256",
    },
)


def constructor() -> None:
    disable_initializers()


# ----------------------------
# Setup
# ----------------------------


@initializer
def initialize(name: str, symbol: str) -> None:
    fungible.init_metadata(name, symbol)
    ownable.init_owner_upgradeable(abi.caller())


# ----------------------------
# Views
# ----------------------------


def name() -> str:
    return fungible.name()


def symbol() -> str:
    return fungible.symbol()


def decimals() -> int:
    return fungible.decimals()


def totalSupply() -> int:
    return fungible.total_supply()


def balanceOf(account: bytes) -> int:
    return fungible.balance_of(account)


def allowance(owner: bytes, spender: bytes) -> int:
    return fungible.allowance(owner, spender)


# ----------------------------
# Transfers & approvals
# ----------------------------


def transfer(to: bytes, amount: int) -> bool:
    return fungible.transfer(abi.caller(), to, amount)


def approve(spender: bytes, amount: int) -> bool:
    return fungible.approve(abi.caller(), spender, amount)


def transferFrom(src: bytes, dst: bytes, amount: int) -> bool:
    return fungible.transfer_from(abi.caller(), src, dst, amount)


def increaseAllowance(spender: bytes, added: int) -> bool:
    return fungible.increase_allowance(abi.caller(), spender, added)


def decreaseAllowance(spender: bytes, subtracted: int) -> bool:
    return fungible.decrease_allowance(abi.caller(), spender, subtracted)


# ----------------------------
# Supply & ownership
# ----------------------------


def mint(to: bytes, amount: int) -> None:
    ownable.require_owner(abi.caller())
    fungible.mint_to(to, amount)


def owner() -> bytes:
    return ownable.get_owner()


def transferOwnership(newOwner: bytes) -> None:
    ownable.transfer_ownership(abi.caller(), newOwner)


def renounceOwnership() -> None:
    ownable.renounce_ownership(abi.caller())
