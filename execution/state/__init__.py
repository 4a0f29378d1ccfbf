"""
execution.state — state subsystem (accounts, journal).

Common symbols are lazily re-exported from their submodules on first access
to keep import-time overhead low and avoid circulars.

Submodules:
- accounts:  Account records (nonce, balance, code hash)
- journal:   Journaling writes, checkpoints, revert/commit
"""

from __future__ import annotations

from importlib import import_module as _imp
from typing import Any, Dict, Tuple

# Map of public attributes → (submodule, symbol)
_exports: Dict[str, Tuple[str, str]] = {
    "Account": ("accounts", "Account"),
    "EMPTY_CODE_HASH": ("accounts", "EMPTY_CODE_HASH"),
    "Journal": ("journal", "Journal"),
}

__all__ = tuple(_exports.keys())


def __getattr__(name: str) -> Any:
    """
    Lazy attribute loader to avoid import-time dependency tangles.
    """
    if name in _exports:
        submod, symbol = _exports[name]
        mod = _imp(f"{__name__}.{submod}")
        return getattr(mod, symbol)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:  # pragma: no cover
    return sorted(list(globals().keys()) + list(__all__))
