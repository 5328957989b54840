"""
Ledger store interface, application codec and an in-memory ledger.

The workflow only sees the LedgerStore protocol: get/put of raw bytes by key,
plus the transaction id, timestamp and caller identity of the current invocation.
Writes made during one invocation become visible together or not at all.
"""
from __future__ import annotations

import itertools
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional, Protocol, runtime_checkable

from pydantic import ValidationError

from exceptions import StorageError
from schemas.application import LoanApplication


@runtime_checkable
class LedgerStore(Protocol):
    async def get(self, key: str) -> Optional[bytes]: ...

    async def put(self, key: str, value: bytes) -> None: ...

    def current_transaction_id(self) -> str: ...

    def current_transaction_timestamp(self) -> datetime: ...

    def caller_identity(self) -> Optional[bytes]: ...


def encode_application(app: LoanApplication) -> bytes:
    """Serialize with camelCase field names; decimals as strings, caller bytes as base64."""
    return app.model_dump_json(by_alias=True).encode("utf-8")


def decode_application(raw: bytes) -> LoanApplication:
    """Decode ledger bytes into a new, caller-owned application."""
    try:
        return LoanApplication.model_validate_json(raw)
    except ValidationError as e:
        raise StorageError(f"Stored application could not be decoded: {e}") from e


async def load_application(store: LedgerStore, application_number: str) -> Optional[LoanApplication]:
    raw = await store.get(application_number)
    if raw is None:
        return None
    return decode_application(raw)


class InMemoryLedger:
    """
    Dict-backed ledger. Each invocation runs in an InMemoryLedgerTransaction
    whose writes are buffered until commit().
    """

    def __init__(self) -> None:
        self._state: dict[str, bytes] = {}
        self._tx_counter = itertools.count(1)

    def __contains__(self, key: str) -> bool:
        return key in self._state

    def snapshot(self, key: str) -> Optional[bytes]:
        """Committed value of a key."""
        return self._state.get(key)

    def begin(
        self,
        caller: Optional[bytes] = None,
        transaction_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> "InMemoryLedgerTransaction":
        return InMemoryLedgerTransaction(
            self,
            transaction_id=transaction_id or f"tx-{next(self._tx_counter):06d}",
            timestamp=timestamp or datetime.now(timezone.utc),
            caller=caller,
        )

    @asynccontextmanager
    async def transaction(self, caller: Optional[bytes] = None) -> AsyncIterator["InMemoryLedgerTransaction"]:
        """Commit on success, discard the write set on any exception."""
        txn = self.begin(caller=caller)
        try:
            yield txn
        except BaseException:
            txn.rollback()
            raise
        txn.commit()

    def _apply(self, writes: dict[str, bytes]) -> None:
        self._state.update(writes)


class InMemoryLedgerTransaction:
    def __init__(
        self,
        ledger: InMemoryLedger,
        transaction_id: str,
        timestamp: datetime,
        caller: Optional[bytes],
    ) -> None:
        self._ledger = ledger
        self._transaction_id = transaction_id
        self._timestamp = timestamp
        self._caller = caller
        self._writes: dict[str, bytes] = {}
        self._closed = False

    async def get(self, key: str) -> Optional[bytes]:
        self._ensure_open()
        if key in self._writes:
            return self._writes[key]
        return self._ledger.snapshot(key)

    async def put(self, key: str, value: bytes) -> None:
        self._ensure_open()
        if not key:
            raise StorageError("Ledger key must not be empty")
        self._writes[key] = bytes(value)

    def current_transaction_id(self) -> str:
        return self._transaction_id

    def current_transaction_timestamp(self) -> datetime:
        return self._timestamp

    def caller_identity(self) -> Optional[bytes]:
        return self._caller

    def commit(self) -> None:
        self._ensure_open()
        self._ledger._apply(self._writes)
        self._closed = True

    def rollback(self) -> None:
        self._writes.clear()
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise StorageError(f"Transaction {self._transaction_id} is already closed")
