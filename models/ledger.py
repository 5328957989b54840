from sqlalchemy import Column, DateTime, LargeBinary, String, func

from database import Base


class LedgerState(Base):
    """Current value of one ledger key (an application number)."""

    __tablename__ = "ledger_state"

    key = Column(String(128), primary_key=True, index=True)
    value = Column(LargeBinary, nullable=False)
    # Transaction that produced the current value
    transaction_id = Column(String(64), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
