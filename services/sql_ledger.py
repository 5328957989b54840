"""
Ledger store backed by the ledger_state table.
One SqlLedgerStore serves one invocation; its writes commit or roll back with the session.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import StorageError
from models import LedgerState


class SqlLedgerStore:
    def __init__(
        self,
        session: AsyncSession,
        caller: Optional[bytes] = None,
        transaction_id: Optional[str] = None,
        timestamp: Optional[datetime] = None,
    ) -> None:
        self._session = session
        self._caller = caller
        self._transaction_id = transaction_id or f"tx-{uuid.uuid4().hex}"
        self._timestamp = timestamp or datetime.now(timezone.utc)

    async def get(self, key: str) -> Optional[bytes]:
        try:
            result = await self._session.execute(select(LedgerState.value).where(LedgerState.key == key))
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read ledger key {key}: {e}") from e
        return result.scalar_one_or_none()

    async def put(self, key: str, value: bytes) -> None:
        if not key:
            raise StorageError("Ledger key must not be empty")
        try:
            row = await self._session.get(LedgerState, key)
            if row is None:
                self._session.add(LedgerState(key=key, value=value, transaction_id=self._transaction_id))
            else:
                row.value = value
                row.transaction_id = self._transaction_id
            await self._session.flush()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write ledger key {key}: {e}") from e

    def current_transaction_id(self) -> str:
        return self._transaction_id

    def current_transaction_timestamp(self) -> datetime:
        return self._timestamp

    def caller_identity(self) -> Optional[bytes]:
        return self._caller
