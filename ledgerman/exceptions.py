"""Ledgerman exceptions."""


class LedgermanError(Exception):
    """
    Structured exception for ledger operations.

    Carries a stable ``code``, a human message and free-form ``data``.

    Usage:
        try:
            LedgerService().award("user-1", 0, "SIGNUP", "Welcome")
        except LedgermanError as e:
            if e.code == "INVALID_AMOUNT":
                handle_bad_input()
    """

    default_code = "LEDGER_ERROR"

    _default_messages = {
        "LEDGER_ERROR": "Ledger operation failed",
        "INVALID_AMOUNT": "Points amount must be a positive integer",
        "INVALID_DELTA": "Delta would break account invariants",
        "INSUFFICIENT_BALANCE": "Insufficient points for redemption",
        "DUPLICATE_REFERENCE": "Reference already processed for this user",
        "VERSION_CONFLICT": "Account changed since it was read",
        "TRANSIENT_STORE_FAILURE": "Store temporarily unavailable",
        "ACCOUNT_NOT_FOUND": "Points account not found",
        "UNKNOWN_ACTION": "Unknown points action",
        "INVALID_PAGE": "limit and offset must not be negative",
    }

    def __init__(self, code: str | None = None, message: str | None = None, **data):
        self.code = code or self.default_code
        self.message = message or self._default_messages.get(self.code, self.code)
        self.data = data
        super().__init__(f"[{self.code}] {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}


class InvalidAmount(LedgermanError):
    """Non-positive amount, rejected before any I/O."""

    default_code = "INVALID_AMOUNT"


class InsufficientBalance(LedgermanError):
    """Redemption exceeds the spendable balance."""

    default_code = "INSUFFICIENT_BALANCE"


class DuplicateReference(LedgermanError):
    """
    A transaction with the same (user_id, reference_id) already exists.

    ``existing`` holds the stored TransactionInfo when the store knows it.
    """

    default_code = "DUPLICATE_REFERENCE"

    def __init__(self, code: str | None = None, message: str | None = None, existing=None, **data):
        self.existing = existing
        super().__init__(code, message, **data)


class VersionConflict(LedgermanError):
    """Optimistic concurrency check failed; the caller should re-read and retry."""

    default_code = "VERSION_CONFLICT"


class TransientStoreFailure(LedgermanError):
    """Store I/O failure or exhausted retries. Safe to retry later."""

    default_code = "TRANSIENT_STORE_FAILURE"
