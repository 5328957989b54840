from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from schemas.lender import BiddingDetails


class ApplicationStatus(IntEnum):
    """Workflow states of a loan application."""

    APPLIED = 0
    QUOTATIONS_RECEIVED = 1
    BID_ACCEPTED = 2
    BID_REJECTED = 3


TERMINAL_STATUSES = frozenset({ApplicationStatus.BID_ACCEPTED, ApplicationStatus.BID_REJECTED})


class TransactionMetadata(BaseModel):
    """Audit record appended on every write of an application."""

    application_state: ApplicationStatus
    transaction_id: str
    transaction_timestamp: Optional[datetime] = None
    caller_metadata: bytes = b""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
        "ser_json_bytes": "base64",
        "val_json_bytes": "base64",
    }


class LoanApplication(BaseModel):
    """Aggregate root: the borrower's request plus its full workflow history."""

    application_number: str = Field(..., min_length=1)
    make: str
    model: str
    loan_amount: Decimal = Field(..., gt=0)
    ssn: str
    age: int = Field(..., ge=0)
    monthly_income: Decimal = Field(..., ge=0)
    credit_score: int
    status: ApplicationStatus = ApplicationStatus.APPLIED
    quotations: list[BiddingDetails] = Field(default_factory=list)
    transactions: list[TransactionMetadata] = Field(default_factory=list)
    # Next bidding number to hand out; advanced by the allocator.
    next_bidding_number: int = Field(1, ge=1)

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    def find_quotation(self, bidding_number: int) -> Optional[BiddingDetails]:
        return next((q for q in self.quotations if q.bidding_number == bidding_number), None)

    @property
    def winning_bid(self) -> Optional[BiddingDetails]:
        return next((q for q in self.quotations if q.is_winning_bid), None)


class EvaluationParams(BaseModel):
    """Read-only projection of the underwriting fields handed to each lender."""

    application_number: str
    loan_amount: Decimal
    ssn: str
    age: int
    monthly_income: Decimal
    credit_score: int

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}

    @classmethod
    def from_application(cls, app: LoanApplication) -> "EvaluationParams":
        return cls(
            application_number=app.application_number,
            loan_amount=app.loan_amount,
            ssn=app.ssn,
            age=app.age,
            monthly_income=app.monthly_income,
            credit_score=app.credit_score,
        )


# Request bodies carry raw values; parsing and InvalidInputError belong to the validator.
class ApplicationCreate(BaseModel):
    application_number: Any = Field(None, alias="applicationNumber")
    make: Any = None
    model: Any = None
    loan_amount: Any = Field(None, alias="loanAmount")
    ssn: Any = None
    age: Any = None
    monthly_income: Any = Field(None, alias="monthlyIncome")
    credit_score: Any = Field(None, alias="creditScore")

    model_config = {"populate_by_name": True}


class BidConfirmation(BaseModel):
    bidding_number: Any = Field(None, alias="biddingNumber")
    status: Any = Field(None, description="Target status: 2 (bid accepted) or 3 (bid rejected)")

    model_config = {"populate_by_name": True}
