# -*- coding: utf-8 -*-
"""
EIP-2612 permit on TokenV2 behind the proxy.

Signatures are produced off-chain with `contracts.tools.signer` and submitted
by a third-party relayer, as a wallet/relayer pair would.
"""
from __future__ import annotations

import pytest

from execution.crypto import keccak256
from execution.errors import (
    ExpiredAuthorizationError,
    InvalidSignatureError,
    ReplayError,
    Revert,
)

from contracts.stdlib.token.permit import (
    DOMAIN_TYPEHASH,
    PERMIT_TYPEHASH,
    domain_separator_for,
    permit_struct_hash,
    typed_data_digest,
)
from contracts.tools.signer import (
    MAX_DEADLINE,
    LocalAccount,
    join_signature,
    permit_digest,
    sign_permit,
    split_signature,
)

CHAIN_ID = 1337
NAME = "TokenName"


def _sign(token, owner: LocalAccount, spender: bytes, value: int, nonce: int, /, deadline=None, **overrides):
    kw = dict(token=token.address, chain_id=CHAIN_ID, name=NAME, spender=spender, value=value, nonce=nonce)
    kw.update(overrides)
    return sign_permit(owner, deadline=deadline, **kw)


def _submit(token, relayer, owner, spender, value, deadline, sig):
    v, r, s = sig
    return token.connect(relayer.address).transact("permit", owner, spender, value, deadline, v, r, s)


# ------------------------------ hashing ------------------------------


def test_typehashes():
    assert DOMAIN_TYPEHASH.hex() == "8b73c3c69bb8fe3d512ecc4cf759cc79239f7b179b0ffacaa9a75d522b39400f"
    assert PERMIT_TYPEHASH.hex() == "6e71edae12b1b97f4d1f60370fef10105fa2faae0126114a169c64845d6126c9"


def test_domain_separator_binds_name_version_chain_and_proxy(token_v2):
    want = domain_separator_for(keccak256(NAME.encode()), keccak256(b"1"), CHAIN_ID, token_v2.address)
    assert token_v2.call("DOMAIN_SEPARATOR") == want


def test_digest_layout():
    ds = b"\x11" * 32
    sh = permit_struct_hash(b"\x01" * 20, b"\x02" * 20, 5, 0, MAX_DEADLINE)
    assert typed_data_digest(ds, sh) == keccak256(b"\x19\x01" + ds + sh)
    assert permit_digest(
        token=b"\x03" * 20, chain_id=1, name="N", owner=b"\x01" * 20, spender=b"\x02" * 20, value=5, nonce=0
    ) == typed_data_digest(
        domain_separator_for(keccak256(b"N"), keccak256(b"1"), 1, b"\x03" * 20),
        sh,
    )


# ------------------------------ happy path ------------------------------


def test_permit_sets_allowance_and_consumes_nonce(token_v2, alice, bob, relayer):
    sig = _sign(token_v2, alice, bob.address, 500, 0)
    receipt = _submit(token_v2, relayer, alice.address, bob.address, 500, MAX_DEADLINE, sig)

    assert token_v2.call("allowance", alice.address, bob.address) == 500
    assert token_v2.call("nonces", alice.address) == 1
    [ev] = receipt.events(b"Approval")
    assert ev.address == token_v2.address
    assert ev.args == {"owner": alice.address, "spender": bob.address, "value": 500}


def test_permitted_spender_can_transfer(token_v2, alice, bob, relayer):
    token_v2.transact("mint", alice.address, 1000)
    _submit(token_v2, relayer, alice.address, bob.address, 300, MAX_DEADLINE, _sign(token_v2, alice, bob.address, 300, 0))
    token_v2.connect(bob.address).transact("transferFrom", alice.address, bob.address, 300)
    assert token_v2.call("balanceOf", bob.address) == 300
    assert token_v2.call("allowance", alice.address, bob.address) == 0


def test_sequential_nonces(token_v2, alice, bob, relayer):
    for nonce, value in enumerate((1, 2, 3)):
        _submit(token_v2, relayer, alice.address, bob.address, value, MAX_DEADLINE,
                _sign(token_v2, alice, bob.address, value, nonce))
    assert token_v2.call("nonces", alice.address) == 3
    assert token_v2.call("allowance", alice.address, bob.address) == 3


def test_deadline_equal_to_block_time_is_accepted(chain, token_v2, alice, bob, relayer):
    deadline = chain.timestamp + chain.config.block_time
    sig = _sign(token_v2, alice, bob.address, 9, 0, deadline=deadline)
    _submit(token_v2, relayer, alice.address, bob.address, 9, deadline, sig)
    assert token_v2.call("allowance", alice.address, bob.address) == 9


# ------------------------------ rejections ------------------------------


def test_replay_is_rejected(token_v2, alice, bob, relayer):
    sig = _sign(token_v2, alice, bob.address, 500, 0)
    _submit(token_v2, relayer, alice.address, bob.address, 500, MAX_DEADLINE, sig)
    with pytest.raises(ReplayError) as ei:
        _submit(token_v2, relayer, alice.address, bob.address, 500, MAX_DEADLINE, sig)
    assert ei.value.reason == "PERMIT:REPLAYED"
    assert token_v2.call("nonces", alice.address) == 1


def test_expired_permit(chain, token_v2, alice, bob, relayer):
    deadline = chain.timestamp
    sig = _sign(token_v2, alice, bob.address, 1, 0, deadline=deadline)
    with pytest.raises(ExpiredAuthorizationError) as ei:
        _submit(token_v2, relayer, alice.address, bob.address, 1, deadline, sig)
    assert ei.value.reason == "PERMIT:EXPIRED"
    assert token_v2.call("nonces", alice.address) == 0


def test_expiry_is_checked_before_signature(chain, token_v2, alice, bob, relayer):
    with pytest.raises(ExpiredAuthorizationError):
        _submit(token_v2, relayer, alice.address, bob.address, 1, chain.timestamp, (27, 1, 1))


def test_signature_by_someone_else(token_v2, alice, bob, relayer):
    forged = _sign(token_v2, bob, bob.address, 500, 0)
    with pytest.raises(InvalidSignatureError) as ei:
        _submit(token_v2, relayer, alice.address, bob.address, 500, MAX_DEADLINE, forged)
    assert not isinstance(ei.value, ReplayError)
    assert ei.value.reason == "PERMIT:INVALID_SIGNATURE"
    assert token_v2.call("allowance", alice.address, bob.address) == 0


def test_tampered_value(token_v2, alice, bob, relayer):
    sig = _sign(token_v2, alice, bob.address, 500, 0)
    with pytest.raises(InvalidSignatureError):
        _submit(token_v2, relayer, alice.address, bob.address, 501, MAX_DEADLINE, sig)


def test_future_nonce_is_invalid_not_replay(token_v2, alice, bob, relayer):
    sig = _sign(token_v2, alice, bob.address, 5, 1)
    with pytest.raises(InvalidSignatureError) as ei:
        _submit(token_v2, relayer, alice.address, bob.address, 5, MAX_DEADLINE, sig)
    assert not isinstance(ei.value, ReplayError)


@pytest.mark.parametrize("override", [
    {"chain_id": CHAIN_ID + 1},
    {"name": "OtherName"},
    {"token": b"\x42" * 20},
])
def test_signature_bound_to_domain(token_v2, alice, bob, relayer, override):
    sig = _sign(token_v2, alice, bob.address, 5, 0, **override)
    with pytest.raises(InvalidSignatureError):
        _submit(token_v2, relayer, alice.address, bob.address, 5, MAX_DEADLINE, sig)


def test_malformed_signature_values(token_v2, alice, bob, relayer):
    with pytest.raises(InvalidSignatureError):
        _submit(token_v2, relayer, alice.address, bob.address, 5, MAX_DEADLINE, (30, 1, 1))
    with pytest.raises(InvalidSignatureError):
        _submit(token_v2, relayer, alice.address, bob.address, 5, MAX_DEADLINE, (27, 0, 0))


def test_zero_spender_is_rejected(token_v2, alice, relayer):
    sig = _sign(token_v2, alice, b"\x00" * 20, 5, 0)
    with pytest.raises(Revert) as ei:
        _submit(token_v2, relayer, alice.address, b"\x00" * 20, 5, MAX_DEADLINE, sig)
    assert ei.value.reason == "TOKEN:ZERO_ADDR"


def test_v1_has_no_permit(token_v1, alice, bob, relayer):
    sig = _sign(token_v1, alice, bob.address, 5, 0)
    with pytest.raises(Revert) as ei:
        _submit(token_v1, relayer, alice.address, bob.address, 5, MAX_DEADLINE, sig)
    assert ei.value.reason == "ABI:UNKNOWN_SELECTOR"


# ------------------------------ signer helpers ------------------------------


def test_split_signature_accepts_both_v_styles():
    sig = LocalAccount.from_label("carol").sign_digest(keccak256(b"m"))
    packed = join_signature(*sig)
    assert split_signature(packed) == sig
    legacy = packed[:64] + bytes([packed[64] - 27])
    assert split_signature(legacy) == sig
    with pytest.raises(ValueError):
        split_signature(packed[:64])


def test_dev_accounts_are_deterministic():
    a = LocalAccount.from_label("alice")
    assert a == LocalAccount.from_label("alice")
    assert a.address != LocalAccount.from_label("bob").address
    assert LocalAccount.from_hex("0x" + a.private_key.hex()).address == a.address
    assert "private_key" not in repr(a)
