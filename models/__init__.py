from models.ledger import LedgerState

__all__ = [
    "LedgerState",
]
