"""
Contract-facing ABI and call-context helpers.

Failure
-------
- revert(reason)             abort the current call with a reason code
- require(cond, reason)      revert(reason) unless cond

Reason codes are short ASCII tags such as ``b"PROXY:NOT_ADMIN"``; the host
maps known codes onto typed errors (see `execution.errors.REVERT_REASONS`).

Context
-------
- caller()          immediate caller of the current frame (msg.sender)
- origin()          transaction signer
- value()           native value attached to the current frame
- this()            executing identity (the proxy under delegation)
- chain_id(), block_number(), block_timestamp()

Calls
-----
- encode_call(name, *args)            build calldata
- decode_call(data)                   split calldata into (selector, args)
- selector(name)                      4-byte function selector
- call(to, data, value=0)             message call; caller becomes this()
- delegatecall(code_address, data)    run other code against this() storage
- is_contract(address)                account has deployed code
"""

from __future__ import annotations

from typing import Any, NoReturn, Union

from execution.errors import revert_error
from execution.runtime.calldata import decode_call, encode_call, selector
from execution.runtime.host import active

Reason = Union[bytes, str]


def revert(reason: Reason = b"REVERT") -> NoReturn:
    raise revert_error(reason)


def require(condition: bool, reason: Reason = b"REQUIRE") -> None:
    """
    Assertion helper for contracts:

        abi.require(amount > 0, b"TOKEN:ZERO_AMOUNT")
    """
    if not condition:
        revert(reason)


# ------------------------------- context -------------------------------------


def caller() -> bytes:
    return active().frame.caller


def origin() -> bytes:
    return active().frame.origin


def value() -> int:
    return active().frame.value


def this() -> bytes:
    return active().frame.address


def chain_id() -> int:
    return active().env.chain_id


def block_number() -> int:
    return active().env.height


def block_timestamp() -> int:
    return active().env.timestamp


def is_contract(address: bytes) -> bool:
    return active().is_contract(address)


# -------------------------------- calls --------------------------------------


def call(to: bytes, data: bytes = b"", value: int = 0) -> Any:
    return active().message_call(to, data, value=value)


def delegatecall(code_address: bytes, data: bytes = b"") -> Any:
    return active().delegate_call(code_address, data)


__all__ = [
    "revert",
    "require",
    "caller",
    "origin",
    "value",
    "this",
    "chain_id",
    "block_number",
    "block_timestamp",
    "is_contract",
    "encode_call",
    "decode_call",
    "selector",
    "call",
    "delegatecall",
]
