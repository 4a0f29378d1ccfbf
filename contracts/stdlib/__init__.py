# -*- coding: utf-8 -*-
"""
contracts.stdlib
================

Reusable building blocks for Python contracts running on the tuproxy host.

Packages
--------
- ``math``     : checked u256 arithmetic
- ``control``  : one-time / versioned initializer guard
- ``access``   : single-owner access control
- ``token``    : fungible token core and the EIP-2612 permit extension
- ``upgrade``  : EIP-1967 slots, the transparent proxy, ProxyAdmin and
                 storage-layout declarations

Contract modules import from here and from the top-level ``stdlib`` facade;
nothing in this package touches chain state outside an active execution.
"""
from __future__ import annotations

__all__ = ["__version__"]

# Bump when stdlib layout/conventions change (not ABI of individual contracts).
__version__ = "0.1.0"
