"""
execution.state.accounts — Account records.

An Account holds three fields:

- nonce:      u256 transaction/creation counter (monotonically increasing)
- balance:    u256 native currency amount
- code_hash:  32-byte hash identifying the account's contract code
              (all-zero for externally owned accounts)

This module intentionally avoids any persistence concerns; the journal copies
Account objects into its overlays and writes them back on commit.
"""

from __future__ import annotations

from dataclasses import dataclass

from execution.errors import InvalidAccess

U256_MAX = (1 << 256) - 1

EMPTY_CODE_HASH: bytes = b"\x00" * 32


def _ensure_u256(name: str, value: int) -> int:
    if not isinstance(value, int):
        raise TypeError(f"{name} must be int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    if value > U256_MAX:
        raise OverflowError(f"{name} exceeds u256")
    return value


@dataclass(slots=True)
class Account:
    """
    A minimal, deterministic account record.

    Invariants:
    - nonce and balance are u256
    - code_hash is exactly 32 bytes
    """
    nonce: int = 0
    balance: int = 0
    code_hash: bytes = EMPTY_CODE_HASH

    def __post_init__(self) -> None:
        self.nonce = _ensure_u256("nonce", int(self.nonce))
        self.balance = _ensure_u256("balance", int(self.balance))
        ch = bytes(self.code_hash)
        if len(ch) != 32:
            raise ValueError("code_hash must be 32 bytes")
        self.code_hash = ch

    @property
    def has_code(self) -> bool:
        return self.code_hash != EMPTY_CODE_HASH

    def copy(self) -> "Account":
        return Account(nonce=self.nonce, balance=self.balance, code_hash=self.code_hash)

    def increment_nonce(self) -> None:
        if self.nonce == U256_MAX:
            raise InvalidAccess("nonce overflow (u256 max)")
        self.nonce += 1

    def credit(self, amount: int) -> None:
        amt = _ensure_u256("amount", int(amount))
        if self.balance + amt > U256_MAX:
            raise InvalidAccess("balance overflow (u256 max)")
        self.balance += amt

    def debit(self, amount: int) -> None:
        """
        Decrease balance by `amount`; raises InvalidAccess if insufficient.
        """
        amt = _ensure_u256("amount", int(amount))
        if self.balance < amt:
            raise InvalidAccess("insufficient balance", op="debit")
        self.balance -= amt

    def to_dict(self) -> dict:
        return {
            "nonce": self.nonce,
            "balance": self.balance,
            "code_hash": self.code_hash.hex(),
        }


__all__ = ["Account", "EMPTY_CODE_HASH", "U256_MAX"]
