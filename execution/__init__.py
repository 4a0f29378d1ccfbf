"""
tuproxy execution layer — deterministic in-process host for Python contracts.

This package exposes only lightweight metadata at import time. The host
(`Chain`), journal and crypto helpers are lazily re-exported on first access:

    from execution import Chain, load_config
    chain = Chain(load_config())
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

from .version import __version__

_EXPORTS: Dict[str, Tuple[str, str]] = {
    "Chain": ("runtime.host", "Chain"),
    "ChainConfig": ("config", "ChainConfig"),
    "load_config": ("config", "load_config"),
    "Receipt": ("types.result", "Receipt"),
    "LogEvent": ("types.events", "LogEvent"),
    "encode_call": ("runtime.calldata", "encode_call"),
    "selector": ("runtime.calldata", "selector"),
    "keccak256": ("crypto", "keccak256"),
}

__all__ = ["__version__", *_EXPORTS]


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
    target = _EXPORTS.get(name)
    if target:
        mod, attr = target
        return getattr(import_module(f".{mod}", __name__), attr)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS))
