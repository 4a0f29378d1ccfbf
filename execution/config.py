"""
execution.config — chain identity, block clock and numeric caps for the host.

This module centralizes configuration for the deterministic contract host. It
has NO third-party deps and is safe to import very early.

Configuration precedence:
  1) Environment variables (TUPROXY_*)
  2) Hardcoded safe defaults below

Key env vars:
  - TUPROXY_CHAIN_ID                 (int)    default: 1337
  - TUPROXY_GENESIS_TIMESTAMP        (int)    default: 1_700_000_000
  - TUPROXY_BLOCK_TIME               (int)    default: 1 (seconds per mined tx)
  - TUPROXY_MAX_CALL_DEPTH           (int)    default: 64
  - TUPROXY_MAX_STORAGE_KEY_BYTES    (int)    default: 64 (never below 64)
  - TUPROXY_MAX_STORAGE_VAL_BYTES    (int)    default: 131_072   (128 KiB)

Usage:
    from execution.config import load_config
    CFG = load_config()
    chain = Chain(CFG)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from functools import lru_cache
from typing import Any, Dict

# Longest key the shipped contracts write is the token allowance key
# (b"tok:allow:" + owner20 + b"|" + spender20 = 51 bytes).
MIN_STORAGE_KEY_BYTES = 64


# ----------------------------- helpers ---------------------------------------


def _env_int(name: str, default: int, *, min_v: int, max_v: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    if v < min_v:
        return min_v
    if v > max_v:
        return max_v
    return v


# ------------------------------- config --------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    # Identity used for EIP-712 domain separation
    chain_id: int

    # Block clock (each successful transaction mines one block)
    genesis_timestamp: int
    block_time: int

    # Numeric caps enforced by the host
    max_call_depth: int
    max_storage_key_bytes: int
    max_storage_value_bytes: int

    def with_overrides(self, **changes: Any) -> "ChainConfig":
        """Return a copy with selected fields replaced (tests, tooling)."""
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "genesis_timestamp": self.genesis_timestamp,
            "block_time": self.block_time,
            "max_call_depth": self.max_call_depth,
            "max_storage_key_bytes": self.max_storage_key_bytes,
            "max_storage_value_bytes": self.max_storage_value_bytes,
        }


@lru_cache(maxsize=1)
def load_config() -> ChainConfig:
    """
    Build and cache a ChainConfig from environment + safe defaults.
    """
    return ChainConfig(
        chain_id=_env_int("TUPROXY_CHAIN_ID", 1337, min_v=1, max_v=(1 << 64) - 1),
        genesis_timestamp=_env_int(
            "TUPROXY_GENESIS_TIMESTAMP", 1_700_000_000, min_v=0, max_v=(1 << 64) - 1
        ),
        block_time=_env_int("TUPROXY_BLOCK_TIME", 1, min_v=0, max_v=3_600),
        max_call_depth=_env_int("TUPROXY_MAX_CALL_DEPTH", 64, min_v=8, max_v=1024),
        max_storage_key_bytes=_env_int("TUPROXY_MAX_STORAGE_KEY_BYTES", 64, min_v=MIN_STORAGE_KEY_BYTES, max_v=256),
        max_storage_value_bytes=_env_int(
            "TUPROXY_MAX_STORAGE_VAL_BYTES", 131_072, min_v=32, max_v=1_048_576
        ),
    )


__all__ = ["ChainConfig", "MIN_STORAGE_KEY_BYTES", "load_config"]
