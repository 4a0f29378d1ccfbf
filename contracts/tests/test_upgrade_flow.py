# -*- coding: utf-8 -*-
"""
End-to-end: deploy TokenV1 behind a proxy, use it, upgrade to TokenV2 through
the ProxyAdmin, then use the new permit entry point on the same address.
"""
from __future__ import annotations

import pytest

from execution.errors import (
    AlreadyInitializedError,
    AuthorizationError,
    InvalidSignatureError,
    ReplayError,
)

from contracts.tools.signer import MAX_DEADLINE, sign_permit
from contracts.tools.upgrades import deploy_proxy, get_implementation_address, upgrade_proxy

TOKEN_V2 = "contracts.examples.token.token_v2"


def test_v1_to_v2_upgrade_flow(chain, deployer, alice, relayer, proxy_admin, token_v1):
    # --- V1 in service ---
    assert token_v1.call("name") == "TokenName"
    assert token_v1.call("symbol") == "TKN"
    assert token_v1.call("decimals") == 18

    token_v1.transact("mint", deployer.address, 1000)
    token_v1.transact("mint", alice.address, 1000)
    assert token_v1.call("totalSupply") == 2000

    v1_impl = get_implementation_address(chain, token_v1.address)

    # --- upgrade through the ProxyAdmin, running permitInit atomically ---
    token = upgrade_proxy(chain, proxy_admin, token_v1.address, TOKEN_V2, call="permitInit")
    assert token.address == token_v1.address
    assert get_implementation_address(chain, token.address) != v1_impl
    assert chain.storage_at(token.address, b"init:version") == b"\x02"

    # --- state carried over ---
    assert token.call("totalSupply") == 2000
    assert token.call("balanceOf", deployer.address) == 1000
    assert token.call("balanceOf", alice.address) == 1000
    assert token.call("name") == "TokenName"
    assert token.call("symbol") == "TKN"
    assert token.call("owner") == deployer.address

    # --- setup entry points are spent, and failing again changes nothing ---
    with pytest.raises(AlreadyInitializedError):
        token.connect(alice.address).transact("initialize", "Evil", "EVL")
    with pytest.raises(AlreadyInitializedError):
        token.connect(alice.address).transact("permitInit")
    assert token.call("name") == "TokenName"
    assert token.call("owner") == deployer.address

    # --- the second account permits a third party to move 500 units ---
    assert token.call("nonces", alice.address) == 0
    sig = sign_permit(alice, token=token.address, chain_id=chain.chain_id, name="TokenName",
                      spender=relayer.address, value=500, nonce=0)
    spender = token.connect(relayer.address)
    spender.transact("permit", alice.address, relayer.address, 500, MAX_DEADLINE, *sig)
    assert token.call("allowance", alice.address, relayer.address) == 500
    assert token.call("nonces", alice.address) == 1

    with pytest.raises(ReplayError):
        spender.transact("permit", alice.address, relayer.address, 500, MAX_DEADLINE, *sig)

    spender.transact("transferFrom", alice.address, relayer.address, 500)
    assert token.call("balanceOf", relayer.address) == 500
    assert token.call("balanceOf", alice.address) == 500
    assert token.call("totalSupply") == 2000

    # --- upgrade authority stays with the ProxyAdmin owner ---
    with pytest.raises(AuthorizationError):
        proxy_admin.connect(alice.address).transact("upgrade", token.address, v1_impl)


def test_permit_does_not_carry_over_to_another_instance(chain, deployer, alice, bob, proxy_admin, token_v2):
    other = deploy_proxy(chain, deployer.address, TOKEN_V2, admin=proxy_admin.address,
                         initializer=None)
    other.transact("initialize", "TokenName", "TKN")
    other.transact("permitInit")

    sig = sign_permit(alice, token=token_v2.address, chain_id=chain.chain_id, name="TokenName",
                      spender=bob.address, value=500, nonce=0)
    with pytest.raises(InvalidSignatureError):
        other.transact("permit", alice.address, bob.address, 500, MAX_DEADLINE, *sig)
    token_v2.transact("permit", alice.address, bob.address, 500, MAX_DEADLINE, *sig)
    assert token_v2.call("allowance", alice.address, bob.address) == 500
    assert other.call("allowance", alice.address, bob.address) == 0
