"""
Environment-driven chain configuration and its clamped caps.
"""
from __future__ import annotations

import pytest

from execution.config import MIN_STORAGE_KEY_BYTES, load_config
from execution.runtime.calldata import encode_call
from execution.runtime.host import Chain

ALLOWANCE_SRC = r'''
from stdlib import storage

EXTERNAL = ("approve",)

def approve(owner, spender, value):
    storage.set_int(b"tok:allow:" + owner + b"|" + spender, value)
'''


@pytest.fixture
def fresh_config():
    load_config.cache_clear()
    yield load_config
    load_config.cache_clear()


def test_defaults(fresh_config, monkeypatch):
    for name in ("TUPROXY_CHAIN_ID", "TUPROXY_BLOCK_TIME", "TUPROXY_MAX_STORAGE_KEY_BYTES"):
        monkeypatch.delenv(name, raising=False)
    cfg = fresh_config()
    assert cfg.chain_id == 1337
    assert cfg.block_time == 1
    assert cfg.max_storage_key_bytes == 64
    assert cfg.as_dict()["max_call_depth"] == cfg.max_call_depth


def test_env_values_are_parsed_and_clamped(fresh_config, monkeypatch):
    monkeypatch.setenv("TUPROXY_CHAIN_ID", "0x7a69")
    monkeypatch.setenv("TUPROXY_BLOCK_TIME", "99999")
    monkeypatch.setenv("TUPROXY_MAX_CALL_DEPTH", "not-a-number")
    cfg = fresh_config()
    assert cfg.chain_id == 31337
    assert cfg.block_time == 3_600
    assert cfg.max_call_depth == 64


@pytest.mark.parametrize("raw", ["32", "50", "1"])
def test_storage_key_cap_never_drops_below_longest_token_key(fresh_config, monkeypatch, raw):
    monkeypatch.setenv("TUPROXY_MAX_STORAGE_KEY_BYTES", raw)
    assert fresh_config().max_storage_key_bytes == MIN_STORAGE_KEY_BYTES


def test_allowance_keys_fit_under_smallest_cap(fresh_config, monkeypatch, compile_contract, alice, bob):
    monkeypatch.setenv("TUPROXY_MAX_STORAGE_KEY_BYTES", "32")
    chain = Chain(fresh_config())
    addr = chain.deploy(alice, compile_contract("allowance", ALLOWANCE_SRC)).contract_address
    chain.transact(alice, addr, encode_call("approve", alice, bob, 5))
    assert chain.storage_at(addr, b"tok:allow:" + alice + b"|" + bob) is not None
