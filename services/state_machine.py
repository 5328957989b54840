"""
Status lifecycle of a loan application:

    Applied -> QuotationsReceived -> BidAccepted | BidRejected

Transitions mutate the application passed in and never touch the ledger;
callers work on a freshly decoded copy and persist it only on success.
"""
from __future__ import annotations

from typing import Any

from exceptions import InvalidTransitionError, UnknownBidError
from schemas.application import TERMINAL_STATUSES, ApplicationStatus, LoanApplication
from schemas.lender import BiddingDetails


def parse_status(value: Any) -> ApplicationStatus:
    """Convert an externally supplied status (int or numeric string) to ApplicationStatus."""
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(int(str(value).strip()))
    except ValueError as e:
        raise InvalidTransitionError(f"Unknown application status {value!r}") from e


def record_quotations(app: LoanApplication, quotations: list[BiddingDetails]) -> LoanApplication:
    """Applied -> QuotationsReceived. Quotations are attached exactly once."""
    if app.status != ApplicationStatus.APPLIED:
        raise InvalidTransitionError(
            f"Application {app.application_number} is in status {app.status.name}; "
            "quotations can only be recorded for an applied application"
        )
    if app.quotations:
        raise InvalidTransitionError(f"Application {app.application_number} already has quotations")
    app.quotations = list(quotations)
    app.status = ApplicationStatus.QUOTATIONS_RECEIVED
    return app


def confirm_bid(app: LoanApplication, bidding_number: int, target_status: ApplicationStatus) -> LoanApplication:
    """
    QuotationsReceived -> BidAccepted | BidRejected.
    Accepting flags the matching quotation as the winning bid; rejecting flags none.
    All checks run before the application is modified.
    """
    if app.status != ApplicationStatus.QUOTATIONS_RECEIVED:
        raise InvalidTransitionError(
            f"Application {app.application_number} is in status {app.status.name}; "
            "bids can only be confirmed once quotations are received"
        )
    if target_status not in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"Target status must be {ApplicationStatus.BID_ACCEPTED.name} or "
            f"{ApplicationStatus.BID_REJECTED.name}, got {target_status.name}"
        )

    if target_status == ApplicationStatus.BID_ACCEPTED:
        winner = app.find_quotation(bidding_number)
        if winner is None:
            raise UnknownBidError(
                f"Application {app.application_number} has no quotation with bidding number {bidding_number}"
            )
        if not winner.accepted:
            raise InvalidTransitionError(
                f"Quotation {bidding_number} was declined by lender {winner.lender_id} and cannot win"
            )
        for quotation in app.quotations:
            quotation.is_winning_bid = quotation.bidding_number == bidding_number

    app.status = target_status
    return app
