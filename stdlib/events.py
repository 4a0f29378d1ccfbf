from __future__ import annotations

from typing import Any, Dict, Mapping

from execution.runtime.host import active

__all__ = ["emit"]


def _to_str_key(k: Any) -> str:
    if isinstance(k, str):
        return k
    if isinstance(k, (bytes, bytearray)):
        return bytes(k).decode("ascii")
    raise TypeError(f"event key must be str or bytes, got {type(k).__name__}")


def emit(name: bytes, args: Mapping[Any, Any]) -> None:
    """
    Contract-facing emit:

        events.emit(b"Upgraded", {"implementation": impl})

    The event is recorded against the executing identity and is discarded if
    the enclosing call reverts.
    """
    if not isinstance(name, (bytes, bytearray)) or not name:
        raise TypeError("event name must be non-empty bytes")
    converted: Dict[str, Any] = {_to_str_key(k): v for k, v in args.items()}
    active().emit(bytes(name), converted)
