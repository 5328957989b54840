from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from exceptions import UnknownApplicationError
from schemas.application import ApplicationStatus, EvaluationParams, LoanApplication
from schemas.lender import DEFAULT_LENDER_PANEL, LenderProfile
from services import audit, state_machine
from services.bidding import BiddingNumberAllocator
from services.ledger import LedgerStore, encode_application, load_application
from services.quote_engine import solicit_quotations
from services.validator import ensure_application_absent, parse_int, validate_application


class LendingWorkflow:
    """
    Create and confirm loan applications on a ledger store.
    The lender panel and logger are injected; nothing here reads module-level state.
    Every precondition is checked before the first put, so a failed invocation writes nothing.
    """

    def __init__(
        self,
        panel: Iterable[LenderProfile] = DEFAULT_LENDER_PANEL,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.panel: tuple[LenderProfile, ...] = tuple(panel)
        if not self.panel:
            raise ValueError("Lender panel must not be empty")
        self.logger = logger or logging.getLogger(__name__)

    async def create_loan_application(
        self,
        store: LedgerStore,
        application_number: Any,
        make: Any,
        model: Any,
        loan_amount: Any,
        ssn: Any,
        age: Any,
        monthly_income: Any,
        credit_score: Any,
    ) -> LoanApplication:
        """
        Validate and save the application, collect one quotation per lender,
        then save again in status QuotationsReceived.
        """
        app = validate_application(
            application_number, make, model, loan_amount, ssn, age, monthly_income, credit_score
        )
        await ensure_application_absent(store, app.application_number)
        await self.persist(store, app)

        allocator = BiddingNumberAllocator(app.next_bidding_number)
        quotations = solicit_quotations(EvaluationParams.from_application(app), self.panel, allocator)
        state_machine.record_quotations(app, quotations)
        app.next_bidding_number = allocator.next_number
        await self.persist(store, app)

        accepted = sum(1 for q in quotations if q.accepted)
        self.logger.info(
            "Application %s received %d quotations (%d accepted)",
            app.application_number,
            len(quotations),
            accepted,
        )
        return app

    async def confirm_bid(
        self,
        store: LedgerStore,
        application_number: str,
        bidding_number: Any,
        target_status: Any,
    ) -> LoanApplication:
        """Accept one quotation as the winning bid, or reject all of them."""
        number = parse_int("biddingNumber", bidding_number)
        status = state_machine.parse_status(target_status)
        app = await self._load_existing(store, application_number)

        state_machine.confirm_bid(app, number, status)
        await self.persist(store, app)

        if status == ApplicationStatus.BID_ACCEPTED:
            self.logger.info("Application %s accepted bid %d", app.application_number, number)
        else:
            self.logger.info("Application %s rejected all bids", app.application_number)
        return app

    async def get_application_details(self, store: LedgerStore, application_number: str) -> LoanApplication:
        return await self._load_existing(store, application_number)

    async def persist(self, store: LedgerStore, app: LoanApplication) -> None:
        """Append the audit entry for this write, then put the encoded application."""
        metadata = audit.record_transaction(app, store, self.logger)
        await store.put(app.application_number, encode_application(app))
        self.logger.debug(
            "Saved application %s in status %s",
            app.application_number,
            app.status.name,
            extra={"application_number": app.application_number, "transaction_id": metadata.transaction_id},
        )

    async def _load_existing(self, store: LedgerStore, application_number: str) -> LoanApplication:
        app = await load_application(store, application_number)
        if app is None:
            raise UnknownApplicationError(f"Application {application_number} not found")
        return app
