"""
execution.errors — execution-layer exceptions for the tuproxy contract host.

The host communicates failures via *typed exceptions*. Contracts never raise
these directly: they call ``stdlib.abi.revert(reason)`` with a short, stable
reason code (e.g. ``b"PROXY:NOT_ADMIN"``) and the host maps that code onto the
matching class below. Callers (tests, tooling) can therefore catch exactly the
check that failed.

Hierarchy
---------
ExecError (base)
 ├─ Revert                      : contract-triggered failure (carries `reason`)
 │   ├─ AuthorizationError      : caller is not the admin/owner for a gated op
 │   ├─ AlreadyInitializedError : setup entry point invoked on a latched guard
 │   ├─ InvalidImplementationError : upgrade target has no code
 │   ├─ ExpiredAuthorizationError  : permit deadline has passed
 │   └─ InvalidSignatureError   : permit signature does not recover to owner
 │       └─ ReplayError         : signature was valid for an already-used nonce
 └─ InvalidAccess               : host-level rule violation (depth, funds, no code)

Notes
-----
* Any of these aborts the whole external call; the host rolls back every
  staged write and event before re-raising.
* These classes avoid importing other packages so that low-level modules
  (journal, host, stdlib facade) can use them without cycles.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Type


@dataclass
class ExecError(Exception):
    """
    Base execution error.

    Attributes:
        message: Human-readable explanation.
        code:    Stable machine code string (e.g., 'REVERT', 'INVALID_ACCESS').
        data:    Optional structured details (kept JSON-serializable).
    """
    message: str = "execution error"
    code: str = "EXEC_ERROR"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for receipts/logs."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class Revert(ExecError):
    """
    Contract-triggered revert.

    `reason` is the contract's reason code decoded as text (e.g.
    ``"PERMIT:EXPIRED"``); it is also stored under ``data["reason"]``.

    Usage:
        raise Revert("require failed", reason="TOKEN:INSUFFICIENT_BALANCE")
    """
    default_message = "reverted"
    error_code = "REVERT"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        reason: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if reason is not None:
            d.setdefault("reason", reason)
        super().__init__(
            message=message or self.default_message,
            code=self.error_code,
            data=d or None,
        )
        self.reason = reason


class AuthorizationError(Revert):
    """Non-authority caller on a control operation, or non-owner on an owner-gated one."""
    default_message = "caller is not authorized"
    error_code = "UNAUTHORIZED"


class AlreadyInitializedError(Revert):
    """Setup entry point invoked while the initialization guard is latched."""
    default_message = "contract is already initialized"
    error_code = "ALREADY_INITIALIZED"


class InvalidImplementationError(Revert):
    """Upgrade target is not deployed executable code."""
    default_message = "new implementation is not a contract"
    error_code = "INVALID_IMPLEMENTATION"


class ExpiredAuthorizationError(Revert):
    """Permit deadline has passed."""
    default_message = "expired deadline"
    error_code = "EXPIRED"


class InvalidSignatureError(Revert):
    """Permit signature does not recover to the claimed owner."""
    default_message = "invalid signature"
    error_code = "INVALID_SIGNATURE"


class ReplayError(InvalidSignatureError):
    """Permit signature is valid, but for a nonce the owner already consumed."""
    default_message = "signature already used"
    error_code = "REPLAYED"


class InvalidAccess(ExecError):
    """
    Illegal access or forbidden operation under the host's rules.

    Examples:
      - Call depth exceeded
      - Value transfer from an account with insufficient balance
      - Storage key/value size limits exceeded
    """
    def __init__(
        self,
        message: str = "invalid access",
        *,
        op: Optional[str] = None,
        address: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        d: Dict[str, Any] = {}
        if data:
            d.update(data)
        if op is not None:
            d.setdefault("op", op)
        if address is not None:
            d.setdefault("address", address)
        super().__init__(message=message, code="INVALID_ACCESS", data=d or None)


# -------- reason-code registry ----------------------------------------------

#: Reason codes raised by the contract library, mapped to their typed error.
#: Unlisted reasons surface as a plain `Revert`.
REVERT_REASONS: Dict[str, Type[Revert]] = {
    "ACCESS:NOT_OWNER": AuthorizationError,
    "PROXY:NOT_ADMIN": AuthorizationError,
    "PROXY:ADMIN_CANNOT_FALLBACK": AuthorizationError,
    "INIT:ALREADY_INITIALIZED": AlreadyInitializedError,
    "PROXY:NOT_CONTRACT": InvalidImplementationError,
    "PERMIT:EXPIRED": ExpiredAuthorizationError,
    "PERMIT:INVALID_SIGNATURE": InvalidSignatureError,
    "PERMIT:REPLAYED": ReplayError,
}


def revert_error(reason: bytes | str, message: Optional[str] = None) -> Revert:
    """
    Build the typed `Revert` for a contract reason code.
    """
    if isinstance(reason, (bytes, bytearray)):
        text = bytes(reason).decode("utf-8", errors="replace")
    else:
        text = str(reason)
    cls = REVERT_REASONS.get(text, Revert)
    return cls(message, reason=text)


# -------- helper utilities ---------------------------------------------------


def error_to_receipt_fields(err: ExecError) -> Dict[str, Any]:
    """
    Map an ExecError to canonical receipt-like fields.

    Returns:
        {
          "status": "REVERT" | "ERROR",
          "error":  {code, message, data?}
        }
    """
    status = "REVERT" if isinstance(err, Revert) else "ERROR"
    return {"status": status, "error": err.to_dict()}


__all__ = [
    "ExecError",
    "Revert",
    "AuthorizationError",
    "AlreadyInitializedError",
    "InvalidImplementationError",
    "ExpiredAuthorizationError",
    "InvalidSignatureError",
    "ReplayError",
    "InvalidAccess",
    "REVERT_REASONS",
    "revert_error",
    "error_to_receipt_fields",
]
