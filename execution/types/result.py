"""
execution.types.result — Receipt container for a successful transaction.

Failed transactions do not produce receipts: the host rolls back and raises the
typed `ExecError` instead (see `execution.errors.error_to_receipt_fields` for a
receipt-shaped view of a failure).

Fields
------
* tx_hash          : bytes — keccak256(b"tx:" || sender || nonce) of the transaction
* block_number     : int   — height of the block that included it
* sender           : bytes
* to               : Optional[bytes] — None for deployments
* contract_address : Optional[bytes] — set for deployments
* return_value     : Any   — the top-level call's return value
* logs             : tuple[LogEvent, ...] — emitted events in order
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .events import LogEvent


def _bytes_to_hex(b: Optional[bytes]) -> Optional[str]:
    if b is None:
        return None
    return "0x" + b.hex()


@dataclass(frozen=True)
class Receipt:
    tx_hash: bytes
    block_number: int
    sender: bytes
    to: Optional[bytes] = None
    contract_address: Optional[bytes] = None
    return_value: Any = None
    logs: Tuple[LogEvent, ...] = field(default_factory=tuple)

    @property
    def is_success(self) -> bool:
        return True

    def events(self, name: bytes) -> Tuple[LogEvent, ...]:
        """Logs with the given event tag, in emission order."""
        return tuple(ev for ev in self.logs if ev.name == name)

    def to_dict(self) -> Dict[str, Any]:
        rv = self.return_value
        if isinstance(rv, (bytes, bytearray)):
            rv = _bytes_to_hex(bytes(rv))
        return {
            "status": "SUCCESS",
            "txHash": _bytes_to_hex(self.tx_hash),
            "blockNumber": self.block_number,
            "from": _bytes_to_hex(self.sender),
            "to": _bytes_to_hex(self.to),
            "contractAddress": _bytes_to_hex(self.contract_address),
            "returnValue": rv,
            "logs": [ev.to_dict() for ev in self.logs],
        }


__all__ = ["Receipt"]
