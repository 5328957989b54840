"""Exception hierarchy for the lending workflow."""


class SmartLendingError(Exception):
    """Base exception for all lending workflow errors."""


class InvalidInputError(SmartLendingError):
    """Raised when creation input is missing or malformed."""


class DuplicateApplicationError(SmartLendingError):
    """Raised when an application with the same number already exists."""


class UnknownApplicationError(SmartLendingError):
    """Raised when an application number is not on the ledger."""


class UnknownBidError(SmartLendingError):
    """Raised when a bidding number matches no quotation of the application."""


class InvalidTransitionError(SmartLendingError):
    """Raised when the application is not in a state that allows the operation."""


class StorageError(SmartLendingError):
    """Raised when a ledger read, write or decode fails."""


class AuditError(StorageError):
    """Raised when the ledger cannot supply a transaction id for the audit trail."""
