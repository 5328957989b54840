from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from exceptions import (
    DuplicateApplicationError,
    InvalidInputError,
    InvalidTransitionError,
    SmartLendingError,
    StorageError,
    UnknownApplicationError,
    UnknownBidError,
)
from schemas.application import ApplicationCreate, BidConfirmation, LoanApplication
from services.ledger import LedgerStore
from services.lending import LendingWorkflow
from services.sql_ledger import SqlLedgerStore

router = APIRouter(prefix="/api/applications", tags=["applications"])

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[SmartLendingError], int] = {
    InvalidInputError: 400,
    DuplicateApplicationError: 409,
    UnknownApplicationError: 404,
    UnknownBidError: 404,
    InvalidTransitionError: 409,
    StorageError: 500,
}


def get_ledger(
    db: AsyncSession = Depends(get_db),
    x_caller_metadata: Optional[str] = Header(None),
) -> LedgerStore:
    """One ledger transaction per request, tagged with the caller identity header."""
    caller = x_caller_metadata.encode("utf-8") if x_caller_metadata else None
    return SqlLedgerStore(db, caller=caller)


def get_workflow() -> LendingWorkflow:
    return LendingWorkflow(panel=settings.lender_panel, logger=logging.getLogger("lending.workflow"))


def _to_http_error(err: SmartLendingError) -> HTTPException:
    for kind in type(err).__mro__:
        if kind in _STATUS_CODES:
            status_code = _STATUS_CODES[kind]
            break
    else:
        status_code = 500
    if status_code >= 500:
        logger.error("Invocation failed: %s", err, exc_info=err)
    return HTTPException(status_code=status_code, detail=str(err))


def _app_to_response(app: LoanApplication) -> dict[str, Any]:
    """Serialize application with camelCase keys, as stored on the ledger."""
    return app.model_dump(mode="json", by_alias=True)


@router.post("", status_code=201)
async def create_application(
    body: ApplicationCreate,
    ledger: LedgerStore = Depends(get_ledger),
    workflow: LendingWorkflow = Depends(get_workflow),
):
    try:
        app = await workflow.create_loan_application(
            ledger,
            application_number=body.application_number,
            make=body.make,
            model=body.model,
            loan_amount=body.loan_amount,
            ssn=body.ssn,
            age=body.age,
            monthly_income=body.monthly_income,
            credit_score=body.credit_score,
        )
    except SmartLendingError as e:
        raise _to_http_error(e) from e
    return _app_to_response(app)


@router.get("/{application_number}")
async def get_application(
    application_number: str,
    ledger: LedgerStore = Depends(get_ledger),
    workflow: LendingWorkflow = Depends(get_workflow),
):
    try:
        app = await workflow.get_application_details(ledger, application_number)
    except SmartLendingError as e:
        raise _to_http_error(e) from e
    return _app_to_response(app)


@router.post("/{application_number}/confirm")
async def confirm_bid(
    application_number: str,
    body: BidConfirmation,
    ledger: LedgerStore = Depends(get_ledger),
    workflow: LendingWorkflow = Depends(get_workflow),
):
    try:
        app = await workflow.confirm_bid(
            ledger,
            application_number,
            bidding_number=body.bidding_number,
            target_status=body.status,
        )
    except SmartLendingError as e:
        raise _to_http_error(e) from e
    return _app_to_response(app)
