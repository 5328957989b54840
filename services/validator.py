"""
Parses raw creation input into a LoanApplication in status Applied.
Inputs arrive as externally supplied primitives (strings from the dispatch layer, or JSON numbers).
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from exceptions import DuplicateApplicationError, InvalidInputError
from schemas.application import ApplicationStatus, LoanApplication
from services.ledger import LedgerStore


def parse_decimal(name: str, value: Any) -> Decimal:
    if isinstance(value, bool) or "_" in str(value):
        raise InvalidInputError(f"{name} must be a decimal number, got {value!r}")
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidInputError(f"{name} must be a decimal number, got {value!r}") from e
    if not parsed.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    return parsed


def parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or "_" in str(value):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise InvalidInputError(f"{name} must be an integer, got {value!r}") from e


def require_text(name: str, value: Any) -> str:
    if value is None:
        raise InvalidInputError(f"{name} is required")
    if not isinstance(value, str):
        raise InvalidInputError(f"{name} must be a string, got {value!r}")
    return value


def validate_application(
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
    Build a well-formed application or raise InvalidInputError.
    The SSN is stored as given; its length is a lender requirement, not an input error.
    """
    number = require_text("applicationNumber", application_number)
    if not number.strip():
        raise InvalidInputError("Application number is required")
    if number != number.strip():
        raise InvalidInputError(f"Application number must not have surrounding whitespace, got {number!r}")
    make = require_text("make", make)
    model = require_text("model", model)
    ssn = require_text("ssn", ssn)

    amount = parse_decimal("loanAmount", loan_amount)
    if amount <= 0:
        raise InvalidInputError(f"loanAmount must be positive, got {amount}")
    parsed_age = parse_int("age", age)
    if parsed_age < 0:
        raise InvalidInputError(f"age must not be negative, got {parsed_age}")
    income = parse_decimal("monthlyIncome", monthly_income)
    if income < 0:
        raise InvalidInputError(f"monthlyIncome must not be negative, got {income}")
    score = parse_int("creditScore", credit_score)

    try:
        return LoanApplication(
            application_number=number,
            make=make,
            model=model,
            loan_amount=amount,
            ssn=ssn,
            age=parsed_age,
            monthly_income=income,
            credit_score=score,
            status=ApplicationStatus.APPLIED,
        )
    except ValidationError as e:
        raise InvalidInputError(str(e)) from e


async def ensure_application_absent(store: LedgerStore, application_number: str) -> None:
    """Duplicate check; the read is the only side effect."""
    if await store.get(application_number) is not None:
        raise DuplicateApplicationError(f"Application {application_number} already exists")
