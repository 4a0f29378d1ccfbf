# -*- coding: utf-8 -*-
"""
Example Contract — Upgradeable Fungible Token, version 2
--------------------------------------------------------

Everything in version 1 plus EIP-2612 `permit`: gasless approvals signed
off-chain by the holder and submitted by anyone.

Added:
  - permitInit() -> None                               (setup for version 2)
  - permit(owner, spender, value, deadline, v, r, s) -> None
  - nonces(owner: bytes) -> int
  - DOMAIN_SEPARATOR() -> bytes

Upgrade path for a live V1 proxy:

    ProxyAdmin.upgradeAndCall(proxy, v2, encode_call("permitInit"))

`permitInit` is a version-2 reinitializer: it runs exactly once per proxy,
and once it has run `initialize` (version 1) can never run either. It binds
the EIP-712 domain to the token's current name.

Storage: version 1 regions unchanged, plus the ``tok:permit:`` region.
"""
from __future__ import annotations

from contracts.examples.token.token_v1 import (  # noqa: F401  re-exported entry points
    STORAGE_LAYOUT as _V1_LAYOUT,
    allowance,
    approve,
    balanceOf,
    constructor,
    decimals,
    decreaseAllowance,
    increaseAllowance,
    initialize,
    mint,
    name,
    owner,
    renounceOwnership,
    symbol,
    totalSupply,
    transfer,
    transferFrom,
    transferOwnership,
)
from contracts.stdlib.control import reinitializer
from contracts.stdlib.token import fungible
from contracts.stdlib.token import permit as _permit
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
    "permitInit",
    "permit",
    "nonces",
    "DOMAIN_SEPARATOR",
)

STORAGE_LAYOUT = StorageLayout(
    name="TokenV2",
    regions={
        **_V1_LAYOUT.regions,
        _permit.K_NONCE_PREFIX: "u256",
        _permit.K_NAME_HASH: "bytes32",
        _permit.K_VERSION_HASH: "bytes32",
    },
)


@reinitializer(2)
def permitInit() -> None:
    _permit.init_permit(fungible.name())


def permit(owner: bytes, spender: bytes, value: int, deadline: int, v: int, r: int, s: int) -> None:
    _permit.permit(owner, spender, value, deadline, v, r, s)


def nonces(owner: bytes) -> int:
    return _permit.nonces(owner)


def DOMAIN_SEPARATOR() -> bytes:
    return _permit.domain_separator()
