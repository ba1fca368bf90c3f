"""
Django Ledgerman - Loyalty points ledger.

Usage:
    from ledgerman import LedgerService

    ledger = LedgerService()
    ledger.award("user-42", 100, "SIGNUP", "Welcome bonus", reference_id="signup:42")
    result = ledger.redeem("user-42", 60, "Discount applied")
    if not result.ok:
        handle_insufficient_balance(result.error)

    ledger.history("user-42", limit=20)
    LedgerService.points_to_next_tier(result.account)
"""


def __getattr__(name):
    if name == "LedgerService":
        from ledgerman.service import LedgerService

        return LedgerService
    if name == "LedgerResult":
        from ledgerman.service import LedgerResult

        return LedgerResult
    if name == "LedgermanError":
        from ledgerman.exceptions import LedgermanError

        return LedgermanError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["LedgerService", "LedgerResult", "LedgermanError"]
__version__ = "0.1.0"
