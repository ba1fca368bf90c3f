"""In-memory account store.

Thread-safe, process-local AccountStore. Used by tests and scripts that
need the ledger without a database. ``atomic()`` holds a re-entrant lock
for the whole unit and restores the previous state if the unit fails.
"""

import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone

from ledgerman.exceptions import DuplicateReference, LedgermanError, VersionConflict
from ledgerman.protocols.store import AccountInfo, NewTransaction, TransactionInfo
from ledgerman.stores import check_page
from ledgerman.tiers import Tier, tier_for


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryAccountStore:
    def __init__(self, clock=None):
        self._lock = threading.RLock()
        self._clock = clock or _utcnow
        self._ids = itertools.count(1)
        self._accounts: dict[str, AccountInfo] = {}
        self._transactions: list[TransactionInfo] = []
        self._references: dict[tuple[str, str], TransactionInfo] = {}

    @contextmanager
    def atomic(self):
        with self._lock:
            snapshot = (
                dict(self._accounts),
                list(self._transactions),
                dict(self._references),
            )
            try:
                yield
            except BaseException:
                self._accounts, self._transactions, self._references = snapshot
                raise

    def on_commit(self, callback):
        # Units commit as soon as atomic() exits.
        callback()

    def get_account(self, user_id: str) -> AccountInfo | None:
        with self._lock:
            return self._accounts.get(user_id)

    def get_or_create_account(self, user_id: str) -> AccountInfo:
        with self._lock:
            account = self._accounts.get(user_id)
            if account is None:
                now = self._clock()
                account = AccountInfo(
                    user_id=user_id,
                    points_balance=0,
                    lifetime_points=0,
                    tier=str(Tier.BRONZE),
                    version=0,
                    created_at=now,
                    updated_at=now,
                )
                self._accounts[user_id] = account
            return account

    def apply_delta(
        self,
        user_id: str,
        points_delta: int,
        lifetime_delta: int,
        expected_version: int,
    ) -> AccountInfo:
        with self._lock:
            current = self._accounts.get(user_id)
            if current is None:
                raise LedgermanError("ACCOUNT_NOT_FOUND", user_id=user_id)
            if current.version != expected_version:
                raise VersionConflict(
                    user_id=user_id,
                    expected_version=expected_version,
                    actual_version=current.version,
                )

            new_balance = current.points_balance + points_delta
            if lifetime_delta < 0 or new_balance < 0:
                raise LedgermanError(
                    "INVALID_DELTA",
                    user_id=user_id,
                    points_delta=points_delta,
                    lifetime_delta=lifetime_delta,
                )
            new_lifetime = current.lifetime_points + lifetime_delta

            updated = replace(
                current,
                points_balance=new_balance,
                lifetime_points=new_lifetime,
                tier=str(tier_for(new_lifetime)),
                version=current.version + 1,
                updated_at=self._clock(),
            )
            self._accounts[user_id] = updated
            return updated

    def append_transaction(self, new_tx: NewTransaction) -> TransactionInfo:
        with self._lock:
            key = (new_tx.user_id, new_tx.reference_id)
            if new_tx.reference_id is not None and key in self._references:
                raise DuplicateReference(
                    existing=self._references[key],
                    user_id=new_tx.user_id,
                    reference_id=new_tx.reference_id,
                )

            tx = TransactionInfo(
                id=next(self._ids),
                user_id=new_tx.user_id,
                points_amount=new_tx.points_amount,
                transaction_type=new_tx.transaction_type,
                description=new_tx.description,
                reference_id=new_tx.reference_id,
                balance_after=new_tx.balance_after,
                created_at=self._clock(),
            )
            self._transactions.append(tx)
            if new_tx.reference_id is not None:
                self._references[key] = tx
            return tx

    def find_transaction(self, user_id: str, reference_id: str) -> TransactionInfo | None:
        with self._lock:
            return self._references.get((user_id, reference_id))

    def list_transactions(
        self,
        user_id: str,
        limit: int,
        offset: int = 0,
    ) -> list[TransactionInfo]:
        check_page(limit, offset)
        with self._lock:
            owned = [tx for tx in self._transactions if tx.user_id == user_id]
        owned.sort(key=lambda tx: (tx.created_at, tx.id), reverse=True)
        return owned[offset:offset + limit]
