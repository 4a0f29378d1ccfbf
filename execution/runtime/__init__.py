"""
execution.runtime — call execution for Python contracts.

Submodules (thin overview)
--------------------------
- env       : BlockEnv / Frame dataclasses read by the stdlib facade
- calldata  : selectors and CBOR argument encoding
- code      : load contract modules into ContractCode (selector tables)
- host      : the Chain host (transactions, nested calls, delegation)

Re-exports
----------
    from execution.runtime import Chain, active
    from execution.runtime import encode_call, decode_call, selector

These are lazily loaded; importing this package does not import the host
until the attributes are first accessed.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Tuple

from ..version import __version__ as __version__  # re-export

# Submodules available for "from execution.runtime import env" style imports.
__all__ = (
    "env",
    "calldata",
    "code",
    "host",
)

# Lazy symbol re-exports: name -> (module, attribute)
_EXPORTS: Dict[str, Tuple[str, str]] = {
    "Chain": ("host", "Chain"),
    "active": ("host", "active"),
    "ContractCode": ("code", "ContractCode"),
    "load_code": ("code", "load_code"),
    "encode_call": ("calldata", "encode_call"),
    "decode_call": ("calldata", "decode_call"),
    "selector": ("calldata", "selector"),
    "BlockEnv": ("env", "BlockEnv"),
    "Frame": ("env", "Frame"),
}


def __getattr__(name: str) -> Any:  # PEP 562 lazy attribute access
    # First, allow "from execution.runtime import env" to load submodule lazily.
    if name in __all__:
        return import_module(f".{name}", __name__)
    # Then, resolve convenience re-exports on first use.
    target = _EXPORTS.get(name)
    if target:
        mod, attr = target
        return getattr(import_module(f".{mod}", __name__), attr)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    # Make dir() show submodules and exported symbols.
    return sorted(list(__all__) + list(_EXPORTS) + ["__version__"])
