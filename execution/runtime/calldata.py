"""
execution.runtime.calldata — selectors and argument encoding for message calls.

Wire format
-----------
    calldata := selector(4) || cbor(list(args))

* ``selector(name) = keccak256(utf8(name))[:4]``. Only the function *name* is
  hashed; overloading is not supported, so two exported names can collide
  only through a genuine 4-byte hash collision (checked at load time).
* Arguments are encoded as a CBOR array with canonical map ordering, so the
  same call always produces the same bytes (tx hashes, permit fixtures).
* Empty calldata is legal and means "no function" (a plain value transfer or
  an empty post-upgrade call).

Values supported: int (arbitrary size, via CBOR bignums), bytes, str, bool,
None, lists and str-keyed dicts of those.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Tuple

import cbor2

from ..crypto import keccak256
from ..errors import Revert

SELECTOR_SIZE = 4


class CalldataError(Revert):
    """Calldata could not be decoded (truncated selector or bad CBOR payload)."""
    default_message = "malformed calldata"
    error_code = "BAD_CALLDATA"


def selector(name: str) -> bytes:
    if not isinstance(name, str) or not name:
        raise ValueError("function name must be a non-empty str")
    return keccak256(name.encode("utf-8"))[:SELECTOR_SIZE]


def encode_args(args: Sequence[Any]) -> bytes:
    return cbor2.dumps(list(args), canonical=True)


def decode_args(payload: bytes) -> List[Any]:
    if not payload:
        return []
    try:
        out = cbor2.loads(payload)
    except (cbor2.CBORDecodeError, ValueError, EOFError) as e:
        raise CalldataError(reason="ABI:BAD_ARGS", data={"error": str(e)}) from e
    if not isinstance(out, list):
        raise CalldataError(reason="ABI:BAD_ARGS", data={"error": "args must be an array"})
    return out


def encode_call(name: str, *args: Any) -> bytes:
    """
    Build calldata for ``name(*args)``.

    >>> encode_call("balanceOf", b"\\x11" * 20)[:4] == selector("balanceOf")
    True
    """
    return selector(name) + encode_args(args)


def decode_call(data: bytes) -> Tuple[bytes, List[Any]]:
    """
    Split calldata into (selector, args). Raises CalldataError when fewer than
    four bytes are present.
    """
    data = bytes(data)
    if len(data) < SELECTOR_SIZE:
        raise CalldataError(reason="ABI:SHORT_CALLDATA", data={"length": len(data)})
    return data[:SELECTOR_SIZE], decode_args(data[SELECTOR_SIZE:])


__all__ = [
    "SELECTOR_SIZE",
    "CalldataError",
    "selector",
    "encode_args",
    "decode_args",
    "encode_call",
    "decode_call",
]
