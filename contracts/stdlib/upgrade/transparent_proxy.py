# -*- coding: utf-8 -*-
"""
contracts.stdlib.upgrade.transparent_proxy
==========================================

Transparent upgradeable proxy contract.

Every call enters through `fallback(data)`, which routes on **who** is
calling:

* caller == admin
    Only the control surface is reachable:
        upgradeTo(newImplementation)
        upgradeAndCall(newImplementation, data)
        getImplementation()
        getAdmin()
        changeAdmin(newAdmin)
    Anything else reverts with ``PROXY:ADMIN_CANNOT_FALLBACK``: the admin can
    never accidentally execute implementation logic.

* caller != admin
    A control selector reverts with ``PROXY:NOT_ADMIN``. Everything else is
    delegated to the current implementation, whose code runs against this
    proxy's storage, address, caller and value; the result (or failure) is
    returned unchanged.

Because the admin is normally a dedicated ProxyAdmin contract, end users
never hit the admin branch and the proxy is transparent to them.

Constructor
-----------
    constructor(logic, admin, data=b"")

sets the admin, points at `logic` and, when `data` is non-empty, delegates it
to `logic` (typically ``encode_call("initialize", ...)``) atomically with
deployment.
"""
from __future__ import annotations

from typing import Any, Callable, Dict

from stdlib import abi  # type: ignore

from . import (
    change_admin,
    get_admin,
    get_implementation,
    upgrade_to_and_call,
)
from .layout import StorageLayout

# The proxy exposes no selectors of its own; routing happens in `fallback`.
EXTERNAL = ()

STORAGE_LAYOUT = StorageLayout(name="TransparentUpgradeableProxy", regions={})

CONTROL_FUNCTIONS = (
    "upgradeTo",
    "upgradeAndCall",
    "getImplementation",
    "getAdmin",
    "changeAdmin",
)

ERR_NOT_ADMIN = b"PROXY:NOT_ADMIN"
ERR_ADMIN_CANNOT_FALLBACK = b"PROXY:ADMIN_CANNOT_FALLBACK"


def constructor(logic: bytes, admin: bytes, data: bytes = b"") -> None:
    change_admin(admin)
    upgrade_to_and_call(logic, data)


# ---------------------------------------------------------------------------
# Admin control surface
# ---------------------------------------------------------------------------


def _upgrade_to(new_implementation: bytes) -> None:
    upgrade_to_and_call(new_implementation, b"")


def _upgrade_and_call(new_implementation: bytes, data: bytes) -> Any:
    return upgrade_to_and_call(new_implementation, data)


def _get_implementation() -> bytes:
    return get_implementation()


def _get_admin() -> bytes:
    return get_admin()


def _change_admin(new_admin: bytes) -> None:
    change_admin(new_admin)


_CONTROL: Dict[bytes, Callable[..., Any]] = {
    abi.selector("upgradeTo"): _upgrade_to,
    abi.selector("upgradeAndCall"): _upgrade_and_call,
    abi.selector("getImplementation"): _get_implementation,
    abi.selector("getAdmin"): _get_admin,
    abi.selector("changeAdmin"): _change_admin,
}


def is_control_selector(sel: bytes) -> bool:
    return bytes(sel) in _CONTROL


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def _admin_dispatch(data: bytes) -> Any:
    if data[:4] not in _CONTROL:
        abi.revert(ERR_ADMIN_CANNOT_FALLBACK)
    sel, args = abi.decode_call(data)
    return _CONTROL[sel](*args)


def _delegate(data: bytes) -> Any:
    if data[:4] in _CONTROL:
        abi.revert(ERR_NOT_ADMIN)
    return abi.delegatecall(get_implementation(), data)


def fallback(data: bytes) -> Any:
    if abi.caller() == get_admin():
        return _admin_dispatch(data)
    return _delegate(data)
