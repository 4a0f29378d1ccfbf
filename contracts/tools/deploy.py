# -*- coding: utf-8 -*-
"""
deploy.py
=========

Deployment scripts for the upgradeable token, and a CLI that rehearses them on
an in-memory chain.

Scripts
-------
deploy_v1(chain, deployer, name, symbol)
    ProxyAdmin + TokenV1 implementation + transparent proxy, initialized with
    `initialize(name, symbol)` through the proxy constructor. The deployer
    owns both the ProxyAdmin and the token.

deploy_v2(chain, deployer, proxy_admin, proxy)
    Validates the V1 → V2 storage layout, deploys TokenV2 and upgrades the
    proxy through the ProxyAdmin with ``upgradeAndCall(..., permitInit())``.

Both return a `DeployRecord`.

CLI
---
    python -m contracts.tools.deploy --name TokenName --symbol TKN --json
    python -m contracts.tools.deploy --v1-only --out build/deploy.json

Environment
-----------
TUPROXY_DEPLOYER_KEY   hex private key (default: derived dev key "deployer")
TUPROXY_CHAIN_ID       chain id for the rehearsal chain (default: config)

Exit codes: 0 ok, 2 bad arguments, 3 deployment failed.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from execution.config import load_config
from execution.errors import ExecError, error_to_receipt_fields
from execution.runtime.host import Chain

from contracts.stdlib.token import MAX_NAME_LEN, MAX_SYMBOL_LEN, is_valid_name, is_valid_symbol
from contracts.tools import __version__, atomic_write_text, canonical_json_str
from contracts.tools import chain_id as _env_chain_id
from contracts.tools.client import Contract
from contracts.tools.signer import LocalAccount
from contracts.tools.upgrades import (
    LayoutError,
    UpgradeSafetyError,
    deploy_proxy,
    deploy_proxy_admin,
    get_admin_address,
    get_implementation_address,
    upgrade_proxy,
)

log = logging.getLogger("contracts.tools.deploy")

TOKEN_V1 = "contracts.examples.token.token_v1"
TOKEN_V2 = "contracts.examples.token.token_v2"


@dataclass(frozen=True)
class DeployRecord:
    chain_id: int
    block_number: int
    deployer: bytes
    proxy_admin: bytes
    proxy: bytes
    implementation: bytes
    version: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "blockNumber": self.block_number,
            "deployer": "0x" + self.deployer.hex(),
            "proxyAdmin": "0x" + self.proxy_admin.hex(),
            "proxy": "0x" + self.proxy.hex(),
            "implementation": "0x" + self.implementation.hex(),
            "version": self.version,
        }


def _record(chain: Chain, deployer: bytes, proxy_admin: bytes, proxy: bytes, version: int) -> DeployRecord:
    return DeployRecord(
        chain_id=chain.chain_id,
        block_number=chain.block_number,
        deployer=deployer,
        proxy_admin=proxy_admin,
        proxy=proxy,
        implementation=get_implementation_address(chain, proxy),
        version=version,
    )


def deploy_v1(chain: Chain, deployer: bytes, name: str, symbol: str) -> DeployRecord:
    admin = deploy_proxy_admin(chain, deployer)
    token = deploy_proxy(chain, deployer, TOKEN_V1, admin=admin.address, args=(name, symbol))
    log.info("TokenV1 %r (%s) live at 0x%s", name, symbol, token.address.hex())
    return _record(chain, deployer, admin.address, token.address, 1)


def deploy_v2(chain: Chain, deployer: bytes, proxy_admin: bytes, proxy: bytes) -> DeployRecord:
    if get_admin_address(chain, proxy) != bytes(proxy_admin):
        raise UpgradeSafetyError(f"0x{bytes(proxy_admin).hex()} is not the admin of 0x{bytes(proxy).hex()}")
    admin = Contract(chain, proxy_admin, sender=deployer, name="ProxyAdmin")
    token = upgrade_proxy(chain, admin, proxy, TOKEN_V2, call="permitInit")
    log.info("proxy 0x%s now runs TokenV2", token.address.hex())
    return _record(chain, deployer, proxy_admin, proxy, 2)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="contracts.tools.deploy",
        description="Rehearse the upgradeable token deployment (V1, then upgrade to V2) on a local chain.",
    )
    p.add_argument("--name", type=str, default="TokenName", help="Token name (default: TokenName)")
    p.add_argument("--symbol", type=str, default="TKN", help="Token symbol (default: TKN)")
    p.add_argument("--chain-id", type=int, default=None, help="Chain ID (default: TUPROXY_CHAIN_ID or config)")
    p.add_argument("--v1-only", action="store_true", help="Stop after deploying V1")
    p.add_argument("--out", type=Path, default=None, help="Write the JSON deployment record to this path")
    p.add_argument("--json", action="store_true", help="Print machine-readable JSON result to stdout")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not is_valid_name(args.name):
        print(f"[deploy] ERROR: --name must be 1..{MAX_NAME_LEN} printable characters", file=sys.stderr)
        return 2
    if not is_valid_symbol(args.symbol):
        print(f"[deploy] ERROR: --symbol must be 1..{MAX_SYMBOL_LEN} printable characters", file=sys.stderr)
        return 2

    config = load_config()
    cid: Optional[int] = args.chain_id or _env_chain_id()
    if cid is not None:
        if cid <= 0:
            print(f"[deploy] ERROR: invalid chain id: {cid}", file=sys.stderr)
            return 2
        config = config.with_overrides(chain_id=cid)

    chain = Chain(config)
    deployer = LocalAccount.from_env()
    chain.fund(deployer.address, 10**18)

    records: Dict[str, Any] = {}
    try:
        v1 = deploy_v1(chain, deployer.address, args.name, args.symbol)
        records["v1"] = v1.to_dict()
        if not args.v1_only:
            v2 = deploy_v2(chain, deployer.address, v1.proxy_admin, v1.proxy)
            records["v2"] = v2.to_dict()
    except ExecError as exc:
        log.debug("receipt fields: %s", canonical_json_str(error_to_receipt_fields(exc)))
        print(f"[deploy] ERROR: deploy failed: {exc}", file=sys.stderr)
        return 3
    except (LayoutError, UpgradeSafetyError) as exc:
        print(f"[deploy] ERROR: unsafe implementation: {exc}", file=sys.stderr)
        return 3

    result = {"tool": "contracts.tools.deploy", "toolVersion": __version__, "deployments": records}
    if args.out is not None:
        path = atomic_write_text(args.out, canonical_json_str(result) + "\n")
        log.info("deployment record written to %s", path)

    if args.json:
        print(canonical_json_str(result))
    else:
        last = records.get("v2") or records["v1"]
        print(f"[deploy] proxy:          {last['proxy']}")
        print(f"[deploy] proxyAdmin:     {last['proxyAdmin']}")
        print(f"[deploy] implementation: {last['implementation']} (v{last['version']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
