"""
Evaluates a loan application on behalf of each lender on the panel.
Every lender runs the same rule; a lender profile only contributes its id and interest type.
Rejection checks run in a fixed priority order and the first failing check decides the reason.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable, Iterable, Optional

from schemas.application import EvaluationParams
from schemas.lender import AcceptStatus, BiddingDetails, LenderProfile
from services.bidding import BiddingNumberAllocator

BASE_RATE = Decimal("5.0")
MIN_CREDIT_SCORE = 300
MIN_AGE = 18
SSN_LENGTH = 7
MIN_MONTHLY_INCOME = Decimal("1000.00")

REASON_CREDIT_SCORE = "Not meeting credit score requirements"
REASON_AGE = "Not meeting age requirements"
REASON_SSN = "Invalid SSN"
REASON_MONTHLY_INCOME = "Not meeting monthly income requirements"

_REJECTION_CHECKS: tuple[tuple[Callable[[EvaluationParams], bool], str], ...] = (
    (lambda p: p.credit_score < MIN_CREDIT_SCORE, REASON_CREDIT_SCORE),
    (lambda p: p.age < MIN_AGE, REASON_AGE),
    (lambda p: len(p.ssn) != SSN_LENGTH, REASON_SSN),
    (lambda p: p.monthly_income < MIN_MONTHLY_INCOME, REASON_MONTHLY_INCOME),
)


def rejection_reason(params: EvaluationParams) -> Optional[str]:
    """Return the first failing requirement, or None when the application is acceptable."""
    for failed, reason in _REJECTION_CHECKS:
        if failed(params):
            return reason
    return None


def credit_delta(credit_score: int) -> Decimal:
    if 500 < credit_score < 700:
        return Decimal("0.25")
    if 300 < credit_score < 500:
        return Decimal("0.50")
    return Decimal("0")


def age_delta(age: int) -> Decimal:
    if 30 < age < 50:
        return Decimal("0.25")
    if age > 50:
        return Decimal("0.50")
    return Decimal("0")


def income_delta(monthly_income: Decimal) -> Decimal:
    if 1000 < monthly_income < 3000:
        return Decimal("0.50")
    if monthly_income > 3000:
        return Decimal("0.25")
    return Decimal("0")


def interest_rate(params: EvaluationParams) -> Decimal:
    """Base rate plus credit, age and income adjustments. All brackets are open intervals."""
    return (
        BASE_RATE
        + credit_delta(params.credit_score)
        + age_delta(params.age)
        + income_delta(params.monthly_income)
    )


def evaluate_quote(params: EvaluationParams, lender: LenderProfile, bidding_number: int) -> BiddingDetails:
    """Run the lender rule for one lender. Pure: depends only on its arguments."""
    reason = rejection_reason(params)
    if reason is not None:
        return BiddingDetails(
            application_number=params.application_number,
            bidding_number=bidding_number,
            lender_id=lender.id,
            application_accept_status=AcceptStatus.REJECT,
            rejection_reason=reason,
        )
    return BiddingDetails(
        application_number=params.application_number,
        bidding_number=bidding_number,
        lender_id=lender.id,
        sanctioned_amount=params.loan_amount,
        interest_type=lender.interest_type,
        interest_rate=interest_rate(params),
        application_accept_status=AcceptStatus.ACCEPT,
        is_winning_bid=False,
    )


def solicit_quotations(
    params: EvaluationParams,
    panel: Iterable[LenderProfile],
    allocator: BiddingNumberAllocator,
) -> list[BiddingDetails]:
    """
    Collect one quotation per lender, in panel order.
    Bidding numbers are allocated in the same order so the result is reproducible.
    """
    return [evaluate_quote(params, lender, allocator.allocate()) for lender in panel]
