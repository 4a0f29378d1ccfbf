"""
Chain host: deployment, transactions, rollback, nested and delegated calls.
"""
from __future__ import annotations

import pytest

from execution.crypto import keccak256
from execution.errors import ExecError, InvalidAccess, Revert, error_to_receipt_fields
from execution.runtime.calldata import encode_call
from execution.runtime.host import Chain, active
from execution.config import load_config

COUNTER_SRC = r'''
from stdlib import abi, events, storage

EXTERNAL = ("inc", "get", "fail_after_write", "boom", "whoami", "env",
            "call_other", "delegate", "recurse", "store_big")

K = b"counter:n"

def constructor(start=0):
    storage.set_int(K, start)

def inc(by=1):
    n = storage.get_int(K) + by
    storage.set_int(K, n)
    events.emit(b"Inc", {"n": n})
    return n

def get():
    return storage.get_int(K)

def fail_after_write():
    storage.set_int(K, 999)
    events.emit(b"Inc", {"n": 999})
    abi.revert(b"COUNTER:NOPE")

def boom():
    storage.set_int(K, 7)
    return {}["missing"]

def whoami():
    return [abi.caller(), abi.origin(), abi.this(), abi.value()]

def env():
    return [abi.chain_id(), abi.block_number(), abi.block_timestamp()]

def call_other(target, data):
    inc()
    return abi.call(target, data)

def delegate(target, data):
    return abi.delegatecall(target, data)

def recurse():
    return abi.call(abi.this(), abi.encode_call("recurse"))

def store_big(n):
    storage.set(b"big", b"\x01" * n)
'''


@pytest.fixture
def counter(chain, compile_contract):
    return compile_contract("counter", COUNTER_SRC)


def _deploy(chain, sender, code, *args):
    return chain.deploy(sender, code, *args).contract_address


def test_deploy_runs_constructor_and_derives_address(chain, alice, counter):
    receipt = chain.deploy(alice, counter, 5)
    assert receipt.contract_address == keccak256(alice + (0).to_bytes(32, "big"))[12:]
    assert receipt.to is None
    assert chain.nonce_of(alice) == 1
    assert chain.block_number == 1
    assert chain.is_contract(receipt.contract_address)
    assert chain.call(receipt.contract_address, encode_call("get")) == 5


def test_transact_returns_value_and_logs(chain, alice, counter):
    addr = _deploy(chain, alice, counter)
    receipt = chain.transact(alice, addr, encode_call("inc", 3))
    assert receipt.return_value == 3
    assert receipt.tx_hash == keccak256(b"tx:" + alice + (1).to_bytes(32, "big"))
    [ev] = receipt.events(b"Inc")
    assert ev.address == addr and ev.args == {"n": 3}
    assert chain.logs(addr, b"Inc") == [ev]
    assert receipt.to_dict()["status"] == "SUCCESS"


def test_revert_leaves_no_trace(chain, alice, counter):
    addr = _deploy(chain, alice, counter, 1)
    nonce, height, n_logs = chain.nonce_of(alice), chain.block_number, len(chain.logs())
    with pytest.raises(Revert) as ei:
        chain.transact(alice, addr, encode_call("fail_after_write"))
    assert ei.value.reason == "COUNTER:NOPE"
    assert chain.call(addr, encode_call("get")) == 1
    assert chain.nonce_of(alice) == nonce
    assert chain.block_number == height
    assert len(chain.logs()) == n_logs
    assert error_to_receipt_fields(ei.value)["status"] == "REVERT"


def test_python_exception_becomes_revert(chain, alice, counter):
    addr = _deploy(chain, alice, counter)
    with pytest.raises(Revert) as ei:
        chain.transact(alice, addr, encode_call("boom"))
    assert ei.value.reason == "VM:EXCEPTION"
    assert isinstance(ei.value.__cause__, KeyError)
    assert chain.call(addr, encode_call("get")) == 0


def test_call_is_read_only(chain, alice, counter):
    addr = _deploy(chain, alice, counter)
    assert chain.call(addr, encode_call("inc", 10)) == 10
    assert chain.call(addr, encode_call("get")) == 0
    assert chain.nonce_of(alice) == 1


def test_unknown_selector_reverts(chain, alice, counter):
    addr = _deploy(chain, alice, counter)
    with pytest.raises(Revert) as ei:
        chain.transact(alice, addr, encode_call("nope"))
    assert ei.value.reason == "ABI:UNKNOWN_SELECTOR"


def test_context_in_direct_and_nested_calls(chain, alice, counter):
    a = _deploy(chain, alice, counter)
    b = _deploy(chain, alice, counter)
    assert chain.call(a, encode_call("whoami"), sender=alice) == [alice, alice, a, 0]
    nested = chain.transact(alice, a, encode_call("call_other", b, encode_call("whoami"))).return_value
    assert nested == [a, alice, b, 0]


def test_block_env_seen_by_transaction(chain, alice, counter):
    addr = _deploy(chain, alice, counter)
    before = chain.timestamp
    chain.advance_time(100)
    got = chain.transact(alice, addr, encode_call("env")).return_value
    assert got == [1337, 2, before + 100 + 1]
    assert chain.timestamp == before + 101


def test_nested_failure_reverts_whole_transaction(chain, alice, counter):
    a = _deploy(chain, alice, counter)
    b = _deploy(chain, alice, counter)
    with pytest.raises(Revert):
        chain.transact(alice, a, encode_call("call_other", b, encode_call("fail_after_write")))
    assert chain.call(a, encode_call("get")) == 0
    assert chain.call(b, encode_call("get")) == 0


def test_delegatecall_runs_against_caller_storage(chain, alice, counter):
    a = _deploy(chain, alice, counter)
    b = _deploy(chain, alice, counter, 100)
    receipt = chain.transact(alice, a, encode_call("delegate", b, encode_call("inc", 2)))
    assert receipt.return_value == 2
    assert chain.call(a, encode_call("get")) == 2
    assert chain.call(b, encode_call("get")) == 100
    assert [ev.address for ev in receipt.logs] == [a]
    who = chain.transact(alice, a, encode_call("delegate", b, encode_call("whoami"))).return_value
    assert who == [alice, alice, a, 0]


def test_call_to_account_without_code_is_noop(chain, alice, bob):
    assert chain.transact(alice, bob, b"").return_value is None


def test_value_transfer_and_insufficient_funds(chain, alice, bob, counter):
    chain.fund(alice, 50)
    addr = _deploy(chain, alice, counter)
    chain.transact(alice, addr, encode_call("get"), value=20)
    assert chain.balance_of(addr) == 20
    assert chain.balance_of(alice) == 30
    with pytest.raises(InvalidAccess):
        chain.transact(alice, bob, b"", value=31)
    assert chain.balance_of(alice) == 30


def test_call_depth_is_capped(compile_contract, alice):
    chain = Chain(load_config().with_overrides(max_call_depth=8))
    addr = _deploy(chain, alice, compile_contract("counter", COUNTER_SRC))
    with pytest.raises(InvalidAccess) as ei:
        chain.transact(alice, addr, encode_call("recurse"))
    assert ei.value.data["op"] == "call"


def test_storage_value_cap(chain, alice, counter):
    addr = _deploy(chain, alice, counter)
    with pytest.raises(InvalidAccess):
        chain.transact(alice, addr, encode_call("store_big", chain.config.max_storage_value_bytes + 1))


def test_facade_outside_execution_is_rejected():
    from stdlib import storage

    with pytest.raises(InvalidAccess):
        active()
    with pytest.raises(ExecError):
        storage.get(b"key")


def test_clock_cannot_go_backwards(chain):
    with pytest.raises(ValueError):
        chain.advance_time(-1)
    with pytest.raises(ValueError):
        chain.set_timestamp(chain.timestamp - 1)
