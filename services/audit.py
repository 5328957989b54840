"""
Audit trail: one TransactionMetadata per write of an application.
Only the transaction id is mandatory; timestamp and caller identity degrade to empty values.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from exceptions import AuditError
from schemas.application import ApplicationStatus, LoanApplication, TransactionMetadata
from services.ledger import LedgerStore

logger = logging.getLogger(__name__)


def build_transaction_metadata(
    store: LedgerStore,
    status: ApplicationStatus,
    log: Optional[logging.Logger] = None,
) -> TransactionMetadata:
    log = log or logger
    try:
        transaction_id = store.current_transaction_id()
    except Exception as e:
        raise AuditError(f"Ledger did not supply a transaction id: {e}") from e
    if not isinstance(transaction_id, str) or not transaction_id:
        raise AuditError(f"Ledger supplied an invalid transaction id {transaction_id!r}")

    try:
        timestamp = store.current_transaction_timestamp()
        if not isinstance(timestamp, datetime):
            raise TypeError(f"expected a datetime, got {type(timestamp).__name__}")
    except Exception as e:
        log.warning("No timestamp for transaction %s: %s", transaction_id, e)
        timestamp = None

    try:
        caller = store.caller_identity()
        if caller is None:
            caller = b""
        elif isinstance(caller, (bytes, bytearray, memoryview)):
            caller = bytes(caller)
        else:
            raise TypeError(f"expected bytes, got {type(caller).__name__}")
    except Exception as e:
        log.warning("No caller identity for transaction %s: %s", transaction_id, e)
        caller = b""

    return TransactionMetadata(
        application_state=status,
        transaction_id=transaction_id,
        transaction_timestamp=timestamp,
        caller_metadata=caller,
    )


def record_transaction(
    app: LoanApplication,
    store: LedgerStore,
    log: Optional[logging.Logger] = None,
) -> TransactionMetadata:
    """Append the audit entry for the write about to happen; returns the entry."""
    metadata = build_transaction_metadata(store, app.status, log)
    app.transactions.append(metadata)
    return metadata
