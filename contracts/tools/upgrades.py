# -*- coding: utf-8 -*-
"""
upgrades.py
===========

Deploy and upgrade transparent proxies with safety checks.

Typical flow (rehearsed end-to-end by `contracts.tools.deploy`):

    admin = deploy_proxy_admin(chain, owner)
    token = deploy_proxy(chain, owner, "contracts.examples.token.token_v1",
                         admin=admin.address, args=("TokenName", "TKN"))
    token = upgrade_proxy(chain, admin, token.address,
                          "contracts.examples.token.token_v2", call="permitInit")

Before anything is sent, an implementation is checked for:

* a declared ``STORAGE_LAYOUT`` that stays clear of the proxy's reserved slots;
* no exported function whose selector collides with the proxy's admin
  surface (such a function would be unreachable for users);
* on upgrade, layout compatibility with the implementation currently live
  behind the proxy (`contracts.stdlib.upgrade.layout.validate_upgrade`).

Violations raise `UpgradeSafetyError` (selectors, missing layout) or
`LayoutError` (storage) and nothing is deployed.

Implementation/admin addresses are read straight from the EIP-1967 slots, so
they work for any caller, including ones the proxy's admin gate would block.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence, Union

from execution.crypto import ZERO_ADDRESS
from execution.runtime.calldata import encode_call, selector
from execution.runtime.code import ContractCode, load_code
from execution.runtime.host import Chain

from contracts.stdlib.upgrade import ADMIN_SLOT, IMPLEMENTATION_SLOT
from contracts.stdlib.upgrade.layout import LayoutError, StorageLayout, validate_layout
from contracts.stdlib.upgrade.layout import validate_upgrade as _validate_layouts
from contracts.stdlib.upgrade.transparent_proxy import CONTROL_FUNCTIONS

from .client import Contract

log = logging.getLogger(__name__)

PROXY_CODE = "contracts.stdlib.upgrade.transparent_proxy"
PROXY_ADMIN_CODE = "contracts.stdlib.upgrade.proxy_admin"

CodeLike = Union[str, Any, ContractCode]


class UpgradeSafetyError(ValueError):
    """An implementation cannot safely sit behind a transparent proxy."""

    def __init__(self, message: str, *, problems: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.problems = list(problems or [message])


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def validate_implementation(code: CodeLike) -> ContractCode:
    """Check a single implementation; returns its loaded ContractCode."""
    contract = load_code(code)
    layout = contract.layout
    if not isinstance(layout, StorageLayout):
        raise UpgradeSafetyError(f"{contract.name}: no STORAGE_LAYOUT declared")
    validate_layout(layout)

    control = {selector(n): n for n in CONTROL_FUNCTIONS}
    clashes = [
        f"{fn!r} collides with proxy admin function {control[sel]!r}"
        for sel, fn in contract.functions.items()
        if sel in control
    ]
    if clashes:
        raise UpgradeSafetyError(f"{contract.name}: selector clash with proxy", problems=clashes)
    return contract


def validate_upgrade(old: CodeLike, new: CodeLike) -> ContractCode:
    """Check `new` on its own and as the successor of `old`."""
    new_code = validate_implementation(new)
    old_layout = load_code(old).layout
    if not isinstance(old_layout, StorageLayout):
        raise UpgradeSafetyError(f"{load_code(old).name}: no STORAGE_LAYOUT declared")
    _validate_layouts(old_layout, new_code.layout)
    return new_code


# ---------------------------------------------------------------------------
# Slot readers
# ---------------------------------------------------------------------------


def get_implementation_address(chain: Chain, proxy: bytes) -> bytes:
    return chain.storage_at(proxy, IMPLEMENTATION_SLOT) or ZERO_ADDRESS


def get_admin_address(chain: Chain, proxy: bytes) -> bytes:
    return chain.storage_at(proxy, ADMIN_SLOT) or ZERO_ADDRESS


# ---------------------------------------------------------------------------
# Deploy / upgrade
# ---------------------------------------------------------------------------


def deploy_proxy_admin(chain: Chain, owner: bytes) -> Contract:
    receipt = chain.deploy(owner, PROXY_ADMIN_CODE)
    log.info("ProxyAdmin deployed at 0x%s (owner 0x%s)", receipt.contract_address.hex(), bytes(owner).hex())
    return Contract(chain, receipt.contract_address, sender=owner, name="ProxyAdmin")


def deploy_implementation(chain: Chain, sender: bytes, code: CodeLike) -> bytes:
    contract = validate_implementation(code)
    receipt = chain.deploy(sender, contract)
    log.info("implementation %s deployed at 0x%s", contract.name, receipt.contract_address.hex())
    return receipt.contract_address


def deploy_proxy(
    chain: Chain,
    sender: bytes,
    code: CodeLike,
    *,
    admin: bytes,
    initializer: Optional[str] = "initialize",
    args: Sequence[Any] = (),
) -> Contract:
    """
    Deploy `code` as an implementation and a transparent proxy in front of
    it, running `initializer(*args)` through the proxy at construction.
    Pass ``initializer=None`` to skip setup.

    Returns a handle on the proxy bound to `sender`.
    """
    impl = deploy_implementation(chain, sender, code)
    data = encode_call(initializer, *args) if initializer else b""
    receipt = chain.deploy(sender, PROXY_CODE, impl, bytes(admin), data)
    log.info(
        "proxy deployed at 0x%s (implementation 0x%s, admin 0x%s)",
        receipt.contract_address.hex(),
        impl.hex(),
        bytes(admin).hex(),
    )
    return Contract(chain, receipt.contract_address, sender=sender, name=load_code(code).name.rsplit(".", 1)[-1])


def upgrade_proxy(
    chain: Chain,
    proxy_admin: Contract,
    proxy: bytes,
    code: CodeLike,
    *,
    call: Optional[str] = None,
    args: Sequence[Any] = (),
) -> Contract:
    """
    Validate `code` against the implementation live behind `proxy`, deploy
    it, and point the proxy at it through `proxy_admin` (sent from the
    admin handle's sender, which must be the ProxyAdmin owner). With `call`,
    the upgrade uses ``upgradeAndCall`` so `call(*args)` runs atomically with
    the swap.
    """
    current = get_implementation_address(chain, proxy)
    current_code = chain.code_at(current)
    if current_code is None:
        raise UpgradeSafetyError(f"0x{bytes(proxy).hex()} is not a proxy (no implementation code)")
    new_code = validate_upgrade(current_code, code)

    impl = deploy_implementation(chain, proxy_admin.sender, new_code)
    if call:
        proxy_admin.transact("upgradeAndCall", bytes(proxy), impl, encode_call(call, *args))
    else:
        proxy_admin.transact("upgrade", bytes(proxy), impl)
    log.info("proxy 0x%s upgraded 0x%s -> 0x%s (%s)", bytes(proxy).hex(), current.hex(), impl.hex(), new_code.name)
    return Contract(chain, proxy, sender=proxy_admin.sender, name=new_code.name.rsplit(".", 1)[-1])


__all__ = [
    "PROXY_CODE",
    "PROXY_ADMIN_CODE",
    "LayoutError",
    "UpgradeSafetyError",
    "validate_implementation",
    "validate_upgrade",
    "get_implementation_address",
    "get_admin_address",
    "deploy_proxy_admin",
    "deploy_implementation",
    "deploy_proxy",
    "upgrade_proxy",
]
