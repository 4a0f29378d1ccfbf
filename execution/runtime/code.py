"""
execution.runtime.code — load Python contract modules as executable code.

A contract is a plain Python module that follows a small convention:

    EXTERNAL = ("balanceOf", "transfer", ...)   # callable entry points
    STORAGE_LAYOUT = StorageLayout(...)          # optional, used by tooling
    def constructor(*args): ...                  # optional, runs once at deploy
    def fallback(data: bytes): ...               # optional, receives unmatched calls

Entry points read chain state only through the `stdlib` facade, so the same
module runs unchanged whether it is called directly or via delegation.

`load_code()` turns a module (or its dotted import path) into a `ContractCode`
with a stable code hash and a selector table. Results are cached per module
name; the host stores ContractCode objects keyed by code hash.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from types import ModuleType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from ..crypto import keccak256
from ..errors import Revert
from .calldata import SELECTOR_SIZE, decode_args, selector

log = logging.getLogger(__name__)


class CodeError(Exception):
    """A module does not satisfy the contract convention."""


@dataclass(frozen=True)
class ContractCode:
    """
    Executable contract code.

    Attributes:
        name:       Dotted module name (diagnostics only).
        code_hash:  keccak256(b"pycode:" + name); unique per module.
        functions:  selector → exported function name.
        module:     The loaded module object.
    """
    name: str
    code_hash: bytes
    functions: Mapping[bytes, str]
    module: ModuleType = field(repr=False, compare=False)

    @classmethod
    def from_module(cls, module: ModuleType) -> "ContractCode":
        exported = getattr(module, "EXTERNAL", None)
        if exported is None:
            raise CodeError(f"{module.__name__}: missing EXTERNAL tuple")
        functions: Dict[bytes, str] = {}
        for fn_name in exported:
            fn = getattr(module, fn_name, None)
            if not callable(fn):
                raise CodeError(f"{module.__name__}: exported {fn_name!r} is not callable")
            sel = selector(fn_name)
            other = functions.get(sel)
            if other is not None:
                raise CodeError(
                    f"{module.__name__}: selector clash 0x{sel.hex()} between {other!r} and {fn_name!r}"
                )
            functions[sel] = fn_name
        return cls(
            name=module.__name__,
            code_hash=keccak256(b"pycode:" + module.__name__.encode("utf-8")),
            functions=functions,
            module=module,
        )

    # ------------------------------------------------------------------ #

    @property
    def layout(self) -> Any:
        return getattr(self.module, "STORAGE_LAYOUT", None)

    @property
    def exports(self) -> Tuple[str, ...]:
        return tuple(self.functions.values())

    def has_function(self, name: str) -> bool:
        return selector(name) in self.functions

    def _callable(self, name: str) -> Optional[Callable[..., Any]]:
        fn = getattr(self.module, name, None)
        return fn if callable(fn) else None

    def run_constructor(self, args: Tuple[Any, ...]) -> None:
        ctor = self._callable("constructor")
        if ctor is None:
            if args:
                raise Revert(reason="ABI:NO_CONSTRUCTOR")
            return
        ctor(*args)

    def dispatch(self, data: bytes) -> Any:
        """
        Route calldata to an exported function, or to `fallback(data)` when
        no selector matches. Empty calldata with no fallback is a no-op.
        """
        fn_name = self.functions.get(bytes(data[:SELECTOR_SIZE])) if len(data) >= SELECTOR_SIZE else None
        if fn_name is not None:
            args = decode_args(bytes(data[SELECTOR_SIZE:]))
            return getattr(self.module, fn_name)(*args)
        fallback = self._callable("fallback")
        if fallback is not None:
            return fallback(bytes(data))
        if not data:
            return None
        raise Revert(reason="ABI:UNKNOWN_SELECTOR", data={"selector": "0x" + bytes(data[:SELECTOR_SIZE]).hex()})


@lru_cache(maxsize=None)
def _load_by_name(name: str) -> ContractCode:
    module = importlib.import_module(name)
    code = ContractCode.from_module(module)
    log.debug("loaded contract code %s (hash=0x%s, %d exports)", name, code.code_hash.hex(), len(code.functions))
    return code


def load_code(source: Union[ModuleType, str, ContractCode]) -> ContractCode:
    """Resolve a module, dotted module path, or ContractCode to ContractCode."""
    if isinstance(source, ContractCode):
        return source
    if isinstance(source, ModuleType):
        return _load_by_name(source.__name__)
    if isinstance(source, str):
        return _load_by_name(source)
    raise TypeError(f"cannot load contract code from {type(source).__name__}")


__all__ = ["CodeError", "ContractCode", "load_code"]
