"""
Fixtures for the contract host tests.

Contracts used here are written inline as source strings and compiled into
throwaway modules, so each test file shows exactly the code it exercises:

    def test_counter(chain, alice, compile_contract):
        code = compile_contract("counter", COUNTER_SRC)
        addr = chain.deploy(alice, code).contract_address
"""
from __future__ import annotations

import os
import types
from typing import Callable

import pytest

from execution.config import load_config
from execution.crypto import keccak256
from execution.runtime.code import ContractCode
from execution.runtime.host import Chain

os.environ.setdefault("PYTHONHASHSEED", "0")
os.environ.setdefault("TZ", "UTC")


def _det_address(tag: str) -> bytes:
    return keccak256(b"test-account:" + tag.encode("utf-8"))[-20:]


@pytest.fixture
def chain() -> Chain:
    return Chain(load_config().with_overrides(chain_id=1337, genesis_timestamp=1_700_000_000, block_time=1))


@pytest.fixture
def alice() -> bytes:
    return _det_address("alice")


@pytest.fixture
def bob() -> bytes:
    return _det_address("bob")


@pytest.fixture
def compile_contract() -> Callable[[str, str], ContractCode]:
    def _compile(name: str, src: str) -> ContractCode:
        mod = types.ModuleType(f"inline_contracts.{name}")
        exec(compile(src, f"<{name}>", "exec"), mod.__dict__)
        return ContractCode.from_module(mod)

    return _compile
