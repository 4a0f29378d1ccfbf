# -*- coding: utf-8 -*-
"""
contracts.stdlib.access
=======================

Access-control helpers for tuproxy contracts.

Owner control lives in `contracts.stdlib.access.ownable` and is re-exported
here. Both the upgrade authority (ProxyAdmin, owner set in its constructor)
and the proxied token (owner set by its initializer) use it.

Storage layout (by convention)
------------------------------
- Owner:
    key `b"access:owner"` → 20-byte address, absent when there is no owner.

Events (convention)
-------------------
- "OwnershipTransferred" args: {"previousOwner": bytes, "newOwner": bytes}
"""
from __future__ import annotations

from .ownable import (
    OWNER_KEY,
    ZERO_ADDRESS,
    get_owner,
    init_owner,
    init_owner_upgradeable,
    renounce_ownership,
    require_owner,
    transfer_ownership,
)

__all__ = [
    "OWNER_KEY",
    "ZERO_ADDRESS",
    "get_owner",
    "init_owner",
    "init_owner_upgradeable",
    "require_owner",
    "transfer_ownership",
    "renounce_ownership",
]
