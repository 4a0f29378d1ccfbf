"""
execution.runtime.host — the in-process chain that executes Python contracts.

`Chain` is a deterministic, single-process host: accounts with balances and
nonces, per-address storage, an event log, and a block clock that advances by
one block per successful transaction. Contracts are Python modules (see
`execution.runtime.code`) that reach state only through the `stdlib` facade;
the facade resolves the *active* host with `active()`.

Message calls
-------------
Every call (top-level or nested) runs inside its own journal checkpoint:

    begin → push Frame → dispatch → commit       (success)
    begin → push Frame → dispatch → revert       (any exception; re-raised)

so a failure at any depth discards exactly the writes and events of the
failing call and its children. A failing *transaction* therefore leaves no
trace at all: no storage writes, no logs, no nonce bump, no new block.

`delegate_call` runs another account's code against the *current* frame's
identity: storage reads/writes and emitted events land on the calling
account, and `caller`/`value` are inherited. This is what the transparent
proxy uses to forward non-admin calls to its implementation.

Addresses
---------
    contract address = keccak256(sender || nonce_be32)[12:]
    tx hash          = keccak256(b"tx:" || sender || nonce_be32)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from ..config import ChainConfig, load_config
from ..crypto import ADDRESS_LENGTH, ZERO_ADDRESS, keccak256
from ..errors import ExecError, InvalidAccess, Revert
from ..state.accounts import Account
from ..state.journal import Journal
from ..types.events import LogEvent
from ..types.result import Receipt
from .code import ContractCode, load_code
from .env import BlockEnv, Frame, to_bytes

log = logging.getLogger(__name__)

AddressLike = Union[bytes, bytearray, str]

# Stack of hosts currently executing contract code (innermost last).
_ACTIVE: List["Chain"] = []


def active() -> "Chain":
    """Return the host executing the current contract call."""
    if not _ACTIVE:
        raise InvalidAccess("no active contract execution", op="active")
    return _ACTIVE[-1]


def _address(value: AddressLike, *, name: str = "address") -> bytes:
    b = to_bytes(value)
    if len(b) != ADDRESS_LENGTH:
        raise ValueError(f"{name} must be {ADDRESS_LENGTH} bytes, got {len(b)}")
    return b


class Chain:
    """
    Deterministic local chain.

    Parameters
    ----------
    config : ChainConfig, optional
        Chain id, clock and caps. Defaults to `load_config()`.
    """

    def __init__(self, config: Optional[ChainConfig] = None) -> None:
        self.config = config or load_config()
        self._accounts: Dict[bytes, Account] = {}
        self._storage: Dict[bytes, Dict[bytes, bytes]] = {}
        self._logs: List[LogEvent] = []
        self._codes: Dict[bytes, ContractCode] = {}
        self._journal = Journal(self._accounts, self._storage, self._logs)
        self._frames: List[Frame] = []
        self.block = BlockEnv(
            height=0,
            timestamp=self.config.genesis_timestamp,
            chain_id=self.config.chain_id,
        )
        # Environment seen by the transaction currently executing.
        self._env: BlockEnv = self.block

    # ------------------------------------------------------------------ #
    # Environment
    # ------------------------------------------------------------------ #

    @property
    def chain_id(self) -> int:
        return self.block.chain_id

    @property
    def block_number(self) -> int:
        return self.block.height

    @property
    def timestamp(self) -> int:
        return self.block.timestamp

    @property
    def env(self) -> BlockEnv:
        return self._env

    @property
    def frame(self) -> Frame:
        if not self._frames:
            raise InvalidAccess("no call frame", op="frame")
        return self._frames[-1]

    def advance_time(self, seconds: int) -> int:
        """Move the clock forward without mining a transaction."""
        if seconds < 0:
            raise ValueError("seconds must be non-negative")
        return self.set_timestamp(self.block.timestamp + seconds)

    def set_timestamp(self, timestamp: int) -> int:
        if timestamp < self.block.timestamp:
            raise ValueError("timestamp cannot move backwards")
        self.block = BlockEnv(height=self.block.height, timestamp=timestamp, chain_id=self.block.chain_id)
        self._env = self.block
        return timestamp

    # ------------------------------------------------------------------ #
    # Accounts (read side)
    # ------------------------------------------------------------------ #

    def fund(self, address: AddressLike, amount: int) -> int:
        acc = self._journal.account_for_write(_address(address))
        acc.credit(amount)
        return acc.balance

    def balance_of(self, address: AddressLike) -> int:
        acc = self._journal.get_account(_address(address))
        return acc.balance if acc is not None else 0

    def nonce_of(self, address: AddressLike) -> int:
        acc = self._journal.get_account(_address(address))
        return acc.nonce if acc is not None else 0

    def code_at(self, address: AddressLike) -> Optional[ContractCode]:
        acc = self._journal.get_account(_address(address))
        if acc is None or not acc.has_code:
            return None
        return self._codes[acc.code_hash]

    def is_contract(self, address: AddressLike) -> bool:
        return self.code_at(address) is not None

    def storage_at(self, address: AddressLike, key: bytes) -> Optional[bytes]:
        """Raw storage read, bypassing any contract logic."""
        return self._journal.storage_get(_address(address), key)

    def logs(self, address: Optional[AddressLike] = None, name: Optional[bytes] = None) -> List[LogEvent]:
        addr = _address(address) if address is not None else None
        return [
            ev
            for ev in self._logs
            if (addr is None or ev.address == addr) and (name is None or ev.name == name)
        ]

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #

    def deploy(self, sender: AddressLike, code: Any, *args: Any, value: int = 0) -> Receipt:
        """
        Create a contract from `code` (module, dotted path or ContractCode) and
        run its constructor with `args`. Returns a receipt whose
        `contract_address` is the new account.
        """
        sender_b = _address(sender, name="sender")
        contract = load_code(code)

        def run(nonce: int) -> Any:
            address = keccak256(sender_b + nonce.to_bytes(32, "big"))[12:]
            existing = self._journal.get_account(address)
            if existing is not None and existing.has_code:
                raise InvalidAccess("address already holds code", op="deploy", address="0x" + address.hex())
            self._codes.setdefault(contract.code_hash, contract)
            frame = Frame(address=address, code_address=address, caller=sender_b, origin=sender_b, value=value)
            with self._checkpoint(frame):
                self._journal.account_for_write(address).code_hash = contract.code_hash
                self._transfer(sender_b, address, value)
                contract.run_constructor(tuple(args))
            return address

        receipt = self._transaction(sender_b, None, run)
        log.debug(
            "deployed %s at 0x%s (block %d)",
            contract.name,
            receipt.contract_address.hex(),
            receipt.block_number,
        )
        return receipt

    def transact(self, sender: AddressLike, to: AddressLike, data: bytes = b"", *, value: int = 0) -> Receipt:
        """Send a state-changing call from an externally owned account."""
        sender_b = _address(sender, name="sender")
        to_b = _address(to, name="to")

        def run(nonce: int) -> Any:
            frame = Frame(address=to_b, code_address=to_b, caller=sender_b, origin=sender_b, value=value)
            return self._execute(frame, bytes(data), transfer_from=sender_b)

        return self._transaction(sender_b, to_b, run)

    def call(self, to: AddressLike, data: bytes = b"", *, sender: AddressLike = ZERO_ADDRESS) -> Any:
        """
        Execute a call against current state and return its result. All writes
        are discarded, and errors propagate exactly as for `transact`.
        """
        sender_b = _address(sender, name="sender")
        to_b = _address(to, name="to")
        frame = Frame(address=to_b, code_address=to_b, caller=sender_b, origin=sender_b)
        marker = self._journal.begin()
        try:
            with self._running():
                return self._execute(frame, bytes(data))
        finally:
            self._journal.revert_to(marker)

    # ------------------------------------------------------------------ #
    # Nested calls (used by stdlib.abi from inside contract code)
    # ------------------------------------------------------------------ #

    def message_call(self, to: AddressLike, data: bytes = b"", *, value: int = 0) -> Any:
        parent = self.frame
        to_b = _address(to, name="to")
        frame = Frame(
            address=to_b,
            code_address=to_b,
            caller=parent.address,
            origin=parent.origin,
            value=value,
            depth=parent.depth + 1,
        )
        return self._execute(frame, bytes(data), transfer_from=parent.address)

    def delegate_call(self, code_address: AddressLike, data: bytes = b"") -> Any:
        parent = self.frame
        frame = Frame(
            address=parent.address,
            code_address=_address(code_address, name="code_address"),
            caller=parent.caller,
            origin=parent.origin,
            value=parent.value,
            depth=parent.depth + 1,
        )
        return self._execute(frame, bytes(data))

    # ------------------------------------------------------------------ #
    # Storage/event hooks for the current frame
    # ------------------------------------------------------------------ #

    def sload(self, key: bytes) -> Optional[bytes]:
        self._check_key(key)
        return self._journal.storage_get(self.frame.address, key)

    def sstore(self, key: bytes, value: bytes) -> None:
        self._check_key(key)
        if not isinstance(value, (bytes, bytearray)):
            raise InvalidAccess("storage value must be bytes", op="sstore")
        if len(value) > self.config.max_storage_value_bytes:
            raise InvalidAccess(
                f"storage value too large (>{self.config.max_storage_value_bytes} bytes)", op="sstore"
            )
        self._journal.storage_set(self.frame.address, key, value)

    def emit(self, name: bytes, args: Dict[str, Any]) -> None:
        self._journal.emit(LogEvent(address=self.frame.address, name=name, args=args))

    def _check_key(self, key: bytes) -> None:
        if not isinstance(key, (bytes, bytearray)) or not key:
            raise InvalidAccess("storage key must be non-empty bytes", op="storage")
        if len(key) > self.config.max_storage_key_bytes:
            raise InvalidAccess(
                f"storage key too long (>{self.config.max_storage_key_bytes} bytes)", op="storage"
            )

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _transaction(self, sender: bytes, to: Optional[bytes], run: Callable[[int], Any]) -> Receipt:
        nonce = self.nonce_of(sender)
        pending = self.block.next(self.config.block_time)
        first_log = len(self._logs)
        marker = self._journal.begin()
        self._env = pending
        try:
            with self._running():
                self._journal.account_for_write(sender).increment_nonce()
                result = run(nonce)
            self._journal.commit()
        except ExecError as e:
            self._journal.revert_to(marker)
            log.info("tx from 0x%s reverted: %s", sender.hex(), e)
            raise
        except BaseException:
            self._journal.revert_to(marker)
            raise
        finally:
            self._env = self.block

        self.block = pending
        self._env = pending
        receipt = Receipt(
            tx_hash=keccak256(b"tx:" + sender + nonce.to_bytes(32, "big")),
            block_number=pending.height,
            sender=sender,
            to=to,
            contract_address=result if to is None else None,
            return_value=None if to is None else result,
            logs=tuple(self._logs[first_log:]),
        )
        log.debug(
            "tx 0x%s mined in block %d (%d logs)",
            receipt.tx_hash.hex(),
            receipt.block_number,
            len(receipt.logs),
        )
        return receipt

    def _execute(self, frame: Frame, data: bytes, *, transfer_from: Optional[bytes] = None) -> Any:
        if frame.depth > self.config.max_call_depth:
            raise InvalidAccess("call depth exceeded", op="call", data={"depth": frame.depth})
        with self._checkpoint(frame):
            if transfer_from is not None:
                self._transfer(transfer_from, frame.address, frame.value)
            code = self.code_at(frame.code_address)
            if code is None:
                return None
            return code.dispatch(data)

    def _transfer(self, src: bytes, dst: bytes, value: int) -> None:
        if value <= 0:
            return
        self._journal.account_for_write(src).debit(value)
        self._journal.account_for_write(dst).credit(value)

    @contextmanager
    def _checkpoint(self, frame: Frame) -> Iterator[None]:
        marker = self._journal.begin()
        self._frames.append(frame)
        try:
            yield
        except ExecError:
            self._journal.revert_to(marker)
            raise
        except Exception as e:
            self._journal.revert_to(marker)
            raise Revert(
                f"contract raised {type(e).__name__}: {e}",
                reason="VM:EXCEPTION",
                data={"type": type(e).__name__},
            ) from e
        else:
            self._journal.commit()
        finally:
            self._frames.pop()

    @contextmanager
    def _running(self) -> Iterator[None]:
        _ACTIVE.append(self)
        try:
            yield
        finally:
            _ACTIVE.pop()


__all__ = ["Chain", "active"]
