# -*- coding: utf-8 -*-
"""
Off-chain upgrade safety: storage layouts, selector clashes, and the deploy
CLI rehearsal.
"""
from __future__ import annotations

import json

import pytest

from execution.errors import Revert
from execution.version import __version__ as execution_version

from contracts.stdlib.upgrade import ADMIN_SLOT, IMPLEMENTATION_SLOT
from contracts.stdlib.upgrade.layout import LayoutError, StorageLayout, validate_layout, validate_upgrade
from contracts.tools import canonical_json_str, from_hex, to_hex
from contracts.tools import deploy as deploy_cli
from contracts.tools.client import Contract
from contracts.tools.upgrades import (
    UpgradeSafetyError,
    get_implementation_address,
    upgrade_proxy,
    validate_implementation,
)
from contracts.tools.upgrades import validate_upgrade as validate_code_upgrade

TOKEN_V1 = "contracts.examples.token.token_v1"
TOKEN_V2 = "contracts.examples.token.token_v2"


# ------------------------------ layouts ------------------------------


def test_token_layouts_are_compatible():
    validate_implementation(TOKEN_V1)
    validate_implementation(TOKEN_V2)
    code = validate_code_upgrade(TOKEN_V1, TOKEN_V2)
    assert code.has_function("permit")


def test_downgrade_drops_permit_regions():
    with pytest.raises(LayoutError) as ei:
        validate_code_upgrade(TOKEN_V2, TOKEN_V1)
    assert any("tok:permit:" in p for p in ei.value.problems)


def test_layout_rules():
    old = StorageLayout(name="Old", regions={b"app:a": "u256", b"app:b": "address"})

    validate_upgrade(old, StorageLayout(name="Grow", regions={**old.regions, b"app:c": "flag"}))

    with pytest.raises(LayoutError) as removed:
        validate_upgrade(old, StorageLayout(name="Drop", regions={b"app:a": "u256"}))
    assert removed.value.problems == ["region b'app:b' removed"]

    with pytest.raises(LayoutError) as changed:
        validate_upgrade(old, StorageLayout(name="Retype", regions={b"app:a": "utf8", b"app:b": "address"}))
    assert "changed encoding" in changed.value.problems[0]

    migrated = StorageLayout(name="Migrate", regions={b"app:a": "utf8"}, migrates=(b"app:a", b"app:b"))
    validate_upgrade(old, migrated)


def test_layout_declaration_errors():
    with pytest.raises(LayoutError):
        StorageLayout(name="Bad", regions={b"app:": "float"})
    with pytest.raises(LayoutError):
        StorageLayout(name="Bad", regions={b"": "u256"})


def test_layout_must_avoid_proxy_slots():
    clash = StorageLayout(name="Clash", regions={IMPLEMENTATION_SLOT[:8]: "bytes32"})
    with pytest.raises(LayoutError) as ei:
        validate_layout(clash)
    assert IMPLEMENTATION_SLOT.hex() in ei.value.problems[0]
    validate_layout(StorageLayout(name="Ok", regions={b"app:": "u256"}), reserved=(ADMIN_SLOT,))


def test_region_lookup_prefers_longest_prefix():
    layout = StorageLayout(name="L", regions={b"tok:": "u256", b"tok:permit:": "u256"})
    assert layout.region_for(b"tok:permit:nonce:x") == b"tok:permit:"
    assert layout.region_for(b"tok:bal:x") == b"tok:"
    assert layout.region_for(b"other") is None
    assert layout.to_dict()["regions"] == {"tok:": "u256", "tok:permit:": "u256"}


# --------------------------- implementation checks ---------------------------

CLASHING_SRC = r'''
from contracts.stdlib.upgrade.layout import StorageLayout
EXTERNAL = ("getAdmin", "ping")
STORAGE_LAYOUT = StorageLayout(name="Clashing", regions={b"app:": "u256"})
def getAdmin():
    return b"\x00" * 20
def ping():
    return "pong"
'''

NO_LAYOUT_SRC = r'''
EXTERNAL = ("ping",)
def ping():
    return "pong"
'''


def test_selector_clash_with_admin_surface(compile_contract):
    with pytest.raises(UpgradeSafetyError) as ei:
        validate_implementation(compile_contract("clashing", CLASHING_SRC))
    assert ei.value.problems == ["'getAdmin' collides with proxy admin function 'getAdmin'"]


def test_missing_layout_is_unsafe(compile_contract):
    with pytest.raises(UpgradeSafetyError):
        validate_implementation(compile_contract("no_layout", NO_LAYOUT_SRC))


def test_rejected_upgrade_sends_nothing(chain, deployer, proxy_admin, token_v2):
    nonce = chain.nonce_of(deployer.address)
    before = get_implementation_address(chain, token_v2.address)
    with pytest.raises(LayoutError):
        upgrade_proxy(chain, proxy_admin, token_v2.address, TOKEN_V1)
    assert chain.nonce_of(deployer.address) == nonce
    assert get_implementation_address(chain, token_v2.address) == before


def test_upgrade_proxy_requires_a_proxy(chain, proxy_admin, alice):
    with pytest.raises(UpgradeSafetyError):
        upgrade_proxy(chain, proxy_admin, alice.address, TOKEN_V2)


# ------------------------------ client ------------------------------


def test_contract_handle_helpers(chain, token_v1, alice):
    anonymous = Contract(chain, token_v1.address)
    assert anonymous.call("symbol") == "TKN"
    with pytest.raises(ValueError):
        anonymous.transact("transfer", alice.address, 1)
    assert anonymous.connect(alice.address).sender == alice.address
    assert token_v1.attach(alice.address, name="X").sender == token_v1.sender
    assert repr(token_v1).startswith("<token_v1 0x")


def test_json_and_hex_helpers():
    assert canonical_json_str({"b": b"\x01\x02", "a": 1}) == '{"a":1,"b":"0x0102"}'
    assert from_hex(to_hex(b"\xab\xcd")) == b"\xab\xcd"
    assert from_hex("abcd") == b"\xab\xcd"


# ------------------------------ deploy CLI ------------------------------


def test_deploy_scripts(chain, deployer):
    v1 = deploy_cli.deploy_v1(chain, deployer.address, "TokenName", "TKN")
    assert v1.version == 1
    v2 = deploy_cli.deploy_v2(chain, deployer.address, v1.proxy_admin, v1.proxy)
    assert v2.version == 2 and v2.proxy == v1.proxy
    assert v2.implementation != v1.implementation
    token = Contract(chain, v1.proxy, sender=deployer.address)
    assert token.call("DOMAIN_SEPARATOR") and token.call("name") == "TokenName"


def test_deploy_v2_checks_admin(chain, deployer, alice):
    v1 = deploy_cli.deploy_v1(chain, deployer.address, "TokenName", "TKN")
    with pytest.raises(UpgradeSafetyError):
        deploy_cli.deploy_v2(chain, deployer.address, alice.address, v1.proxy)


def test_cli_json_output(capsys):
    assert deploy_cli.main(["--json", "--chain-id", "31337"]) == 0
    out = json.loads(capsys.readouterr().out)
    v1, v2 = out["deployments"]["v1"], out["deployments"]["v2"]
    assert v1["chainId"] == v2["chainId"] == 31337
    assert v1["proxy"] == v2["proxy"]
    assert (v1["version"], v2["version"]) == (1, 2)
    assert out["toolVersion"] == execution_version


def test_cli_writes_record(tmp_path, capsys):
    out_path = tmp_path / "build" / "deploy.json"
    assert deploy_cli.main(["--v1-only", "--out", str(out_path), "--name", "Other", "--symbol", "OTH"]) == 0
    record = json.loads(out_path.read_text(encoding="utf-8"))
    assert list(record["deployments"]) == ["v1"]
    assert "proxy:" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [
    ["--chain-id", "-5"],
    ["--symbol", ""],
    ["--name", "x" * 65],
    ["--name", "Token\nName"],
    ["--symbol", "TOOLONGSYMBOL"],
])
def test_cli_rejects_bad_input(argv, monkeypatch):
    def _unreachable(*_a, **_kw):
        raise AssertionError("bad input must be rejected before deploying")

    monkeypatch.setattr(deploy_cli, "deploy_v1", _unreachable)
    assert deploy_cli.main(argv) == 2


def test_cli_reports_failed_deploy(monkeypatch, capsys):
    def _reverting(*_a, **_kw):
        raise Revert(reason="TOKEN:BAD_NAME")

    monkeypatch.setattr(deploy_cli, "deploy_v1", _reverting)
    assert deploy_cli.main([]) == 3
    assert "deploy failed" in capsys.readouterr().err


def test_cli_result_is_reproducible(capsys):
    deploy_cli.main(["--json"])
    first = capsys.readouterr().out
    deploy_cli.main(["--json"])
    assert capsys.readouterr().out == first
