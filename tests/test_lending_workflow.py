"""
End-to-end workflow tests on the in-memory ledger.
Each invocation runs in its own ledger transaction, committed only on success.
"""
import unittest
from decimal import Decimal

from exceptions import (
    DuplicateApplicationError,
    InvalidInputError,
    InvalidTransitionError,
    StorageError,
    UnknownApplicationError,
    UnknownBidError,
)
from schemas.application import ApplicationStatus
from schemas.lender import AcceptStatus, InterestType, LenderProfile
from services.ledger import InMemoryLedger, decode_application
from services.lending import LendingWorkflow

A100 = {
    "application_number": "A100",
    "make": "Toyota",
    "model": "Corolla",
    "loan_amount": "20000",
    "ssn": "1234567",
    "age": "35",
    "monthly_income": "4000",
    "credit_score": "650",
}


class FailingPutLedger(InMemoryLedger):
    """Ledger whose transactions fail on the n-th put."""

    def __init__(self, fail_on: int):
        super().__init__()
        self.fail_on = fail_on

    def begin(self, caller=None, transaction_id=None, timestamp=None):
        txn = super().begin(caller, transaction_id, timestamp)
        original_put = txn.put
        calls = {"n": 0}

        async def put(key, value):
            calls["n"] += 1
            if calls["n"] == self.fail_on:
                raise StorageError("disk full")
            await original_put(key, value)

        txn.put = put
        return txn


class WorkflowTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.ledger = InMemoryLedger()
        self.workflow = LendingWorkflow()

    async def create(self, caller=None, **overrides):
        async with self.ledger.transaction(caller=caller) as txn:
            return await self.workflow.create_loan_application(txn, **{**A100, **overrides})

    async def confirm(self, application_number, bidding_number, status, caller=None):
        async with self.ledger.transaction(caller=caller) as txn:
            return await self.workflow.confirm_bid(txn, application_number, bidding_number, status)

    def stored(self, application_number="A100"):
        return decode_application(self.ledger.snapshot(application_number))


class TestCreateLoanApplication(WorkflowTestCase):
    async def test_reference_application(self):
        app = await self.create(caller=b"borrower")
        self.assertEqual(app.status, ApplicationStatus.QUOTATIONS_RECEIVED)
        self.assertEqual(len(app.quotations), 4)
        self.assertEqual(len({q.bidding_number for q in app.quotations}), 4)
        self.assertTrue(all(q.application_accept_status == AcceptStatus.ACCEPT for q in app.quotations))
        self.assertTrue(all(q.interest_rate == Decimal("5.75") for q in app.quotations))
        self.assertEqual(
            [q.interest_type for q in app.quotations],
            [InterestType.SIMPLE, InterestType.FLOATING, InterestType.SIMPLE, InterestType.FLOATING],
        )
        self.assertFalse(any(q.is_winning_bid for q in app.quotations))
        self.assertEqual(app.next_bidding_number, 5)

    async def test_stored_copy_matches_returned(self):
        app = await self.create()
        self.assertEqual(self.stored(), app)

    async def test_audit_trail_has_one_entry_per_write(self):
        app = await self.create(caller=b"borrower")
        self.assertEqual(
            [t.application_state for t in app.transactions],
            [ApplicationStatus.APPLIED, ApplicationStatus.QUOTATIONS_RECEIVED],
        )
        self.assertEqual(len({t.transaction_id for t in app.transactions}), 1)
        self.assertTrue(all(t.caller_metadata == b"borrower" for t in app.transactions))

    async def test_duplicate_leaves_original_untouched(self):
        await self.create()
        before = self.ledger.snapshot("A100")
        with self.assertRaises(DuplicateApplicationError):
            await self.create(make="Honda", credit_score="200")
        self.assertEqual(self.ledger.snapshot("A100"), before)

    async def test_invalid_input_writes_nothing(self):
        with self.assertRaises(InvalidInputError):
            await self.create(loan_amount="lots")
        self.assertNotIn("A100", self.ledger)

    async def test_padded_application_number_writes_nothing(self):
        with self.assertRaises(InvalidInputError):
            await self.create(application_number=" A100 ")
        self.assertNotIn("A100", self.ledger)
        self.assertNotIn(" A100 ", self.ledger)

    async def test_rejected_application_still_quoted(self):
        app = await self.create(credit_score="250")
        self.assertEqual(app.status, ApplicationStatus.QUOTATIONS_RECEIVED)
        self.assertTrue(all(q.rejection_reason == "Not meeting credit score requirements" for q in app.quotations))

    async def test_failed_second_write_persists_nothing(self):
        self.ledger = FailingPutLedger(fail_on=2)
        with self.assertRaises(StorageError):
            await self.create()
        self.assertNotIn("A100", self.ledger)

    async def test_injected_panel(self):
        self.workflow = LendingWorkflow(panel=[LenderProfile(id=9, interest_type=InterestType.FLOATING)])
        app = await self.create()
        self.assertEqual([q.lender_id for q in app.quotations], [9])

    def test_empty_panel_rejected(self):
        with self.assertRaises(ValueError):
            LendingWorkflow(panel=[])


class TestConfirmBid(WorkflowTestCase):
    async def test_accept_winning_bid(self):
        created = await self.create()
        target = created.quotations[1].bidding_number
        app = await self.confirm("A100", str(target), "2", caller=b"dealer")
        self.assertEqual(app.status, ApplicationStatus.BID_ACCEPTED)
        self.assertEqual([q.is_winning_bid for q in app.quotations], [False, True, False, False])
        self.assertEqual(self.stored(), app)
        self.assertEqual(app.transactions[-1].application_state, ApplicationStatus.BID_ACCEPTED)
        self.assertEqual(app.transactions[-1].caller_metadata, b"dealer")
        self.assertEqual(len(app.transactions), 3)

    async def test_reject_all_bids(self):
        await self.create()
        app = await self.confirm("A100", 1, 3)
        self.assertEqual(app.status, ApplicationStatus.BID_REJECTED)
        self.assertIsNone(app.winning_bid)

    async def test_unknown_bid_leaves_state_unchanged(self):
        await self.create()
        before = self.ledger.snapshot("A100")
        with self.assertRaises(UnknownBidError):
            await self.confirm("A100", 999, 2)
        self.assertEqual(self.ledger.snapshot("A100"), before)

    async def test_unknown_application(self):
        with self.assertRaises(UnknownApplicationError):
            await self.confirm("A404", 1, 2)

    async def test_terminal_application_rejected(self):
        await self.create()
        await self.confirm("A100", 1, 2)
        before = self.ledger.snapshot("A100")
        for status in (2, 3):
            with self.subTest(status=status):
                with self.assertRaises(InvalidTransitionError):
                    await self.confirm("A100", 1, status)
        self.assertEqual(self.ledger.snapshot("A100"), before)

    async def test_invalid_target_status(self):
        await self.create()
        for status in (0, 1, 5, "x"):
            with self.subTest(status=status):
                with self.assertRaises(InvalidTransitionError):
                    await self.confirm("A100", 1, status)

    async def test_invalid_bidding_number(self):
        await self.create()
        with self.assertRaises(InvalidInputError):
            await self.confirm("A100", "first", 2)

    async def test_corrupt_ledger_value(self):
        async with self.ledger.transaction() as txn:
            await txn.put("A100", b"garbage")
        with self.assertRaises(StorageError):
            await self.confirm("A100", 1, 2)


class TestGetApplicationDetails(WorkflowTestCase):
    async def test_reads_stored_application(self):
        created = await self.create()
        app = await self.workflow.get_application_details(self.ledger.begin(), "A100")
        self.assertEqual(app, created)

    async def test_unknown_application(self):
        with self.assertRaises(UnknownApplicationError):
            await self.workflow.get_application_details(self.ledger.begin(), "A404")


if __name__ == "__main__":
    unittest.main()
