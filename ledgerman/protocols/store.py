"""Account store protocol: persistence contract for the ledger engine."""

from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Protocol, runtime_checkable


@dataclass(frozen=True)
class AccountInfo:
    """Snapshot of a points account as read from the store."""

    user_id: str
    points_balance: int
    lifetime_points: int
    tier: str  # bronze | silver | gold | platinum
    version: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class TransactionInfo:
    """Stored, immutable ledger transaction."""

    id: int
    user_id: str
    points_amount: int  # positive = award, negative = redemption
    transaction_type: str
    description: str
    reference_id: str | None
    balance_after: int
    created_at: datetime


@dataclass(frozen=True)
class NewTransaction:
    """Transaction to append; the store assigns id and created_at."""

    user_id: str
    points_amount: int
    transaction_type: str
    description: str
    balance_after: int
    reference_id: str | None = None


@runtime_checkable
class AccountStore(Protocol):
    """
    Protocol for durable account and transaction persistence.

    Implemented by stores/orm.py (Django ORM) and stores/memory.py.

    Configuration in settings.py:
        LEDGERMAN = {
            "STORE_BACKEND": "ledgerman.stores.orm.DjangoAccountStore",
        }
    """

    def atomic(self) -> AbstractContextManager:
        """
        Unit of work: everything inside commits together or not at all.

        Backend I/O errors surface as TransientStoreFailure.
        """
        ...

    def on_commit(self, callback: Callable[[], None]) -> None:
        """
        Run ``callback`` once the enclosing transaction commits.

        Dropped if it rolls back. Runs immediately outside a transaction.
        """
        ...

    def get_account(self, user_id: str) -> AccountInfo | None:
        """Read an account without creating it."""
        ...

    def get_or_create_account(self, user_id: str) -> AccountInfo:
        """
        Return the account, creating a zeroed Bronze one if missing.

        Two concurrent calls for a new user yield the same account.
        """
        ...

    def apply_delta(
        self,
        user_id: str,
        points_delta: int,
        lifetime_delta: int,
        expected_version: int,
    ) -> AccountInfo:
        """
        Adjust balance and lifetime points together and recompute the tier.

        Raises:
            VersionConflict: If the stored version is not expected_version
            LedgermanError: INVALID_DELTA if the balance would go negative
                or lifetime points would decrease
        """
        ...

    def append_transaction(self, new_tx: NewTransaction) -> TransactionInfo:
        """
        Insert a transaction row.

        Raises:
            DuplicateReference: If (user_id, reference_id) already exists
        """
        ...

    def find_transaction(self, user_id: str, reference_id: str) -> TransactionInfo | None:
        """Look up a transaction by its idempotency key."""
        ...

    def list_transactions(
        self,
        user_id: str,
        limit: int,
        offset: int = 0,
    ) -> list[TransactionInfo]:
        """Transactions for a user, most recent first (created_at, then id)."""
        ...
