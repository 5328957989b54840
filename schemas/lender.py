from __future__ import annotations

from decimal import Decimal
from enum import Enum, IntEnum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class InterestType(str, Enum):
    """How a lender prices its quote over the life of the loan."""

    SIMPLE = "simple"
    FLOATING = "floating"


class AcceptStatus(IntEnum):
    """Lender decision on an application."""

    REJECT = 0
    ACCEPT = 1


class LenderProfile(BaseModel):
    """Static configuration of one lender on the panel."""

    id: int = Field(..., ge=1)
    interest_type: InterestType

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}


DEFAULT_LENDER_PANEL: tuple[LenderProfile, ...] = (
    LenderProfile(id=1, interest_type=InterestType.SIMPLE),
    LenderProfile(id=2, interest_type=InterestType.FLOATING),
    LenderProfile(id=3, interest_type=InterestType.SIMPLE),
    LenderProfile(id=4, interest_type=InterestType.FLOATING),
)


class BiddingDetails(BaseModel):
    """One lender's answer to an application. Only is_winning_bid changes after creation."""

    application_number: str
    bidding_number: int
    lender_id: int
    sanctioned_amount: Optional[Decimal] = None
    interest_type: Optional[InterestType] = None
    interest_rate: Optional[Decimal] = None
    application_accept_status: AcceptStatus
    rejection_reason: Optional[str] = None
    is_winning_bid: bool = False

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @property
    def accepted(self) -> bool:
        return self.application_accept_status == AcceptStatus.ACCEPT
