from schemas.application import (
    TERMINAL_STATUSES,
    ApplicationCreate,
    ApplicationStatus,
    BidConfirmation,
    EvaluationParams,
    LoanApplication,
    TransactionMetadata,
)
from schemas.lender import (
    DEFAULT_LENDER_PANEL,
    AcceptStatus,
    BiddingDetails,
    InterestType,
    LenderProfile,
)

__all__ = [
    "AcceptStatus",
    "ApplicationCreate",
    "ApplicationStatus",
    "BidConfirmation",
    "BiddingDetails",
    "DEFAULT_LENDER_PANEL",
    "EvaluationParams",
    "InterestType",
    "LenderProfile",
    "LoanApplication",
    "TERMINAL_STATUSES",
    "TransactionMetadata",
]
