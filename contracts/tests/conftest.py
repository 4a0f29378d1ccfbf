# -*- coding: utf-8 -*-
"""
contracts.tests.conftest
========================

Pytest fixtures for the proxy, admin and token contracts.

Goals:
- A fresh **deterministic local chain** per test (fixed chain id, genesis
  timestamp and block time) so addresses, hashes and permit digests are
  reproducible.
- **Dev accounts** with stable keys (`LocalAccount.from_label`), so permit
  signatures can be produced in tests.
- Ready-made deployments: a ProxyAdmin, and a TokenV1 proxy behind it
  initialized as ("TokenName", "TKN") by the deployer.

Usage (inside a test file):
    def test_transfer(token_v1, alice, bob):
        token_v1.connect(alice.address).transact("transfer", bob.address, 1)
"""
from __future__ import annotations

import os
import types
from typing import Callable

import pytest

from execution.config import load_config
from execution.runtime.code import ContractCode
from execution.runtime.host import Chain

from contracts.tools.client import Contract
from contracts.tools.signer import LocalAccount
from contracts.tools.upgrades import deploy_proxy, deploy_proxy_admin, upgrade_proxy

os.environ.setdefault("PYTHONHASHSEED", "0")
os.environ.setdefault("TZ", "UTC")

CHAIN_ID = 1337
GENESIS_TIMESTAMP = 1_700_000_000

TOKEN_V1 = "contracts.examples.token.token_v1"
TOKEN_V2 = "contracts.examples.token.token_v2"
TOKEN_NAME = "TokenName"
TOKEN_SYMBOL = "TKN"


@pytest.fixture
def chain() -> Chain:
    cfg = load_config().with_overrides(chain_id=CHAIN_ID, genesis_timestamp=GENESIS_TIMESTAMP, block_time=1)
    return Chain(cfg)


@pytest.fixture
def deployer() -> LocalAccount:
    return LocalAccount.from_label("deployer")


@pytest.fixture
def alice() -> LocalAccount:
    return LocalAccount.from_label("alice")


@pytest.fixture
def bob() -> LocalAccount:
    return LocalAccount.from_label("bob")


@pytest.fixture
def relayer() -> LocalAccount:
    return LocalAccount.from_label("relayer")


@pytest.fixture
def proxy_admin(chain: Chain, deployer: LocalAccount) -> Contract:
    return deploy_proxy_admin(chain, deployer.address)


@pytest.fixture
def token_v1(chain: Chain, deployer: LocalAccount, proxy_admin: Contract) -> Contract:
    """TokenV1 behind a transparent proxy administered by `proxy_admin`."""
    return deploy_proxy(
        chain,
        deployer.address,
        TOKEN_V1,
        admin=proxy_admin.address,
        args=(TOKEN_NAME, TOKEN_SYMBOL),
    )


@pytest.fixture
def token_v2(chain: Chain, token_v1: Contract, proxy_admin: Contract) -> Contract:
    """The `token_v1` proxy upgraded to TokenV2 with `permitInit()`."""
    return upgrade_proxy(chain, proxy_admin, token_v1.address, TOKEN_V2, call="permitInit")


@pytest.fixture
def compile_contract() -> Callable[[str, str], ContractCode]:
    """Compile an inline contract source string into ContractCode."""

    def _compile(name: str, src: str) -> ContractCode:
        mod = types.ModuleType(f"inline_contracts.{name}")
        exec(compile(src, f"<{name}>", "exec"), mod.__dict__)
        return ContractCode.from_module(mod)

    return _compile
