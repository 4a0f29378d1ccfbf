# -*- coding: utf-8 -*-
"""
contracts.stdlib.upgrade.proxy_admin
====================================

ProxyAdmin: the single upgrade authority for one or more transparent proxies.

Deploy it once, pass its address as the `admin` of every proxy, and drive
upgrades through it. Because the ProxyAdmin *contract* (not an externally
owned account) is the proxies' admin, the humans operating it can still use
the proxied application normally.

Every entry point except `owner()` is owner-gated (``ACCESS:NOT_OWNER``).
Failures raised by the proxy (e.g. ``PROXY:NOT_CONTRACT``) propagate
unchanged.

ABI
---
    owner() -> bytes
    transferOwnership(newOwner)
    renounceOwnership()
    getProxyImplementation(proxy) -> bytes
    getProxyAdmin(proxy) -> bytes
    changeProxyAdmin(proxy, newAdmin)
    upgrade(proxy, implementation)
    upgradeAndCall(proxy, implementation, data)     # forwards attached value
"""
from __future__ import annotations

from typing import Any

from stdlib import abi  # type: ignore

from ..access import ownable
from .layout import StorageLayout

EXTERNAL = (
    "owner",
    "transferOwnership",
    "renounceOwnership",
    "getProxyImplementation",
    "getProxyAdmin",
    "changeProxyAdmin",
    "upgrade",
    "upgradeAndCall",
)

STORAGE_LAYOUT = StorageLayout(name="ProxyAdmin", regions={ownable.OWNER_KEY: "address"})


def constructor() -> None:
    ownable.init_owner(abi.caller())


def _only_owner() -> None:
    ownable.require_owner(abi.caller())


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


def owner() -> bytes:
    return ownable.get_owner()


def transferOwnership(newOwner: bytes) -> None:
    ownable.transfer_ownership(abi.caller(), newOwner)


def renounceOwnership() -> None:
    ownable.renounce_ownership(abi.caller())


# ---------------------------------------------------------------------------
# Proxy control
# ---------------------------------------------------------------------------


def getProxyImplementation(proxy: bytes) -> bytes:
    _only_owner()
    return abi.call(proxy, abi.encode_call("getImplementation"))


def getProxyAdmin(proxy: bytes) -> bytes:
    _only_owner()
    return abi.call(proxy, abi.encode_call("getAdmin"))


def changeProxyAdmin(proxy: bytes, newAdmin: bytes) -> None:
    _only_owner()
    abi.call(proxy, abi.encode_call("changeAdmin", newAdmin))


def upgrade(proxy: bytes, implementation: bytes) -> None:
    _only_owner()
    abi.call(proxy, abi.encode_call("upgradeTo", implementation))


def upgradeAndCall(proxy: bytes, implementation: bytes, data: bytes) -> Any:
    _only_owner()
    return abi.call(proxy, abi.encode_call("upgradeAndCall", implementation, data), value=abi.value())
