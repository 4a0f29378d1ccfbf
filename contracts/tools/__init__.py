# -*- coding: utf-8 -*-
"""
Contracts tooling used by deploy/upgrade scripts and tests:
- Canonical JSON encode for deterministic deployment records
- Hex helpers for addresses and hashes
- FS utilities (atomic writes, mkdir -p)
- Tiny env accessors (deployer key, chain id)

Submodules:
- client    Contract handles bound to a Chain
- signer    Local dev accounts and EIP-2612 permit signing
- upgrades  Proxy deploy/upgrade helpers with storage-layout checks
- deploy    Rehearsal scripts and CLI (`python -m contracts.tools.deploy`)
"""
from __future__ import annotations

import errno
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Final, Optional, Union

from execution.version import __version__

__all__ = [
    "__version__",
    "canonical_json_str",
    "canonical_json_bytes",
    "to_hex",
    "from_hex",
    "ensure_dir",
    "atomic_write_bytes",
    "atomic_write_text",
    "env",
    "chain_id",
]


# ---------------------------------------------------------------------------
# Canonical JSON (deterministic, stable across Python versions)
# ---------------------------------------------------------------------------

_JSON_SEPARATORS: Final[tuple] = (",", ":")


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return to_hex(bytes(obj))
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json_str(obj: Any) -> str:
    """
    Serialize an object to a canonical JSON string:
    - UTF-8 safe, no whitespace, sorted keys
    - bytes become 0x-hex; objects with `to_dict()` are expanded
    """
    return json.dumps(
        obj,
        ensure_ascii=False,
        sort_keys=True,
        separators=_JSON_SEPARATORS,
        allow_nan=False,
        default=_json_default,
    )


def canonical_json_bytes(obj: Any) -> bytes:
    """Canonical JSON encoded as UTF-8 bytes."""
    return canonical_json_str(obj).encode("utf-8")


# ---------------------------------------------------------------------------
# Hex
# ---------------------------------------------------------------------------


def to_hex(b: bytes) -> str:
    return "0x" + bytes(b).hex()


def from_hex(s: Union[str, bytes]) -> bytes:
    if isinstance(s, (bytes, bytearray)):
        return bytes(s)
    h = s[2:] if s.startswith(("0x", "0X")) else s
    return bytes.fromhex(h)


# ---------------------------------------------------------------------------
# Filesystem helpers
# ---------------------------------------------------------------------------


def ensure_dir(p: Union[str, "os.PathLike[str]"]) -> Path:
    """mkdir -p for a directory path; returns Path. No error if exists."""
    path = Path(p)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        if e.errno != errno.EEXIST:
            raise
    return path


def atomic_write_bytes(path: Union[str, "os.PathLike[str]"], data: bytes) -> Path:
    """
    Write bytes atomically: tmp file in the same directory → fsync → rename.
    Readers only ever see complete records.
    """
    target = Path(path)
    ensure_dir(target.parent)
    with tempfile.NamedTemporaryFile(dir=str(target.parent), delete=False) as tf:
        tf.write(data)
        tf.flush()
        os.fsync(tf.fileno())
        tmp_name = tf.name
    os.replace(tmp_name, target)
    return target


def atomic_write_text(path: Union[str, "os.PathLike[str]"], text: str) -> Path:
    return atomic_write_bytes(path, text.encode("utf-8"))


# ---------------------------------------------------------------------------
# Env helpers
# ---------------------------------------------------------------------------


def env(name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Read an environment variable. A value starting with '@' is a file
    reference: the rest is a path whose stripped contents are returned.
    """
    val = os.getenv(name, default)
    if isinstance(val, str) and val.startswith("@"):
        return Path(val[1:]).read_text(encoding="utf-8").strip()
    return val


def chain_id(default: Optional[int] = None) -> Optional[int]:
    """
    Chain id override for tooling (TUPROXY_CHAIN_ID), or `default` when unset
    or unparsable.
    """
    cid = env("TUPROXY_CHAIN_ID")
    try:
        return int(cid) if cid is not None else default
    except ValueError:
        return default
