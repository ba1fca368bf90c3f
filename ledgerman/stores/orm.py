"""Django ORM account store.

All mutations are conditional on the account ``version`` read by the
caller; a concurrent writer turns the update into a VersionConflict.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace

from django.db import IntegrityError, InterfaceError, OperationalError, transaction
from django.db.models import F
from django.utils import timezone

from ledgerman.exceptions import (
    DuplicateReference,
    LedgermanError,
    TransientStoreFailure,
    VersionConflict,
)
from ledgerman.models import PointsAccount, PointsTransaction
from ledgerman.protocols.store import AccountInfo, NewTransaction, TransactionInfo
from ledgerman.stores import check_page
from ledgerman.tiers import tier_for

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str):
    """Translate backend I/O errors into TransientStoreFailure."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        logger.warning("[ledgerman] store failure during %s: %s", operation, exc)
        raise TransientStoreFailure(operation=operation, error=str(exc)) from exc


class DjangoAccountStore:
    """AccountStore backed by PointsAccount / PointsTransaction."""

    def __init__(self, using: str = "default"):
        self.using = using

    @contextmanager
    def atomic(self):
        with _store_errors("atomic"):
            with transaction.atomic(using=self.using):
                yield

    def on_commit(self, callback):
        transaction.on_commit(callback, using=self.using)

    def _accounts(self):
        return PointsAccount.objects.using(self.using)

    def _transactions(self):
        return PointsTransaction.objects.using(self.using)

    def get_account(self, user_id: str) -> AccountInfo | None:
        with _store_errors("get_account"):
            account = self._accounts().filter(user_id=user_id).first()
        return account.to_info() if account else None

    def get_or_create_account(self, user_id: str) -> AccountInfo:
        # get_or_create re-reads after an IntegrityError, so a creation race
        # resolves to the winner's row.
        with _store_errors("get_or_create_account"):
            account, created = self._accounts().get_or_create(user_id=user_id)
        if created:
            logger.info("[ledgerman] created points account for user %s", user_id)
        return account.to_info()

    def apply_delta(
        self,
        user_id: str,
        points_delta: int,
        lifetime_delta: int,
        expected_version: int,
    ) -> AccountInfo:
        if lifetime_delta < 0:
            raise LedgermanError(
                "INVALID_DELTA",
                message="Lifetime points cannot decrease",
                user_id=user_id,
                lifetime_delta=lifetime_delta,
            )

        with _store_errors("apply_delta"):
            rows = self._accounts().filter(user_id=user_id)
            current = rows.first()
            if current is None:
                raise LedgermanError("ACCOUNT_NOT_FOUND", user_id=user_id)
            if current.version != expected_version:
                raise VersionConflict(
                    user_id=user_id,
                    expected_version=expected_version,
                    actual_version=current.version,
                )

            new_balance = current.points_balance + points_delta
            if new_balance < 0:
                raise LedgermanError(
                    "INVALID_DELTA",
                    message="Balance cannot go negative",
                    user_id=user_id,
                    balance=current.points_balance,
                    points_delta=points_delta,
                )
            new_lifetime = current.lifetime_points + lifetime_delta
            new_tier = tier_for(new_lifetime)
            now = timezone.now()

            updated = rows.filter(version=expected_version).update(
                points_balance=new_balance,
                lifetime_points=new_lifetime,
                tier=new_tier,
                version=F("version") + 1,
                updated_at=now,
            )

        if updated != 1:
            raise VersionConflict(user_id=user_id, expected_version=expected_version)

        return replace(
            current.to_info(),
            points_balance=new_balance,
            lifetime_points=new_lifetime,
            tier=str(new_tier),
            version=expected_version + 1,
            updated_at=now,
        )

    def append_transaction(self, new_tx: NewTransaction) -> TransactionInfo:
        if new_tx.reference_id is not None:
            existing = self.find_transaction(new_tx.user_id, new_tx.reference_id)
            if existing is not None:
                raise DuplicateReference(
                    existing=existing,
                    user_id=new_tx.user_id,
                    reference_id=new_tx.reference_id,
                )

        with _store_errors("append_transaction"):
            try:
                # Savepoint, so the unique violation leaves the outer unit usable.
                with transaction.atomic(using=self.using):
                    tx = self._transactions().create(
                        user_id=new_tx.user_id,
                        points_amount=new_tx.points_amount,
                        transaction_type=new_tx.transaction_type,
                        description=new_tx.description,
                        reference_id=new_tx.reference_id,
                        balance_after=new_tx.balance_after,
                    )
            except IntegrityError as exc:
                existing = None
                if new_tx.reference_id is not None:
                    existing = self.find_transaction(new_tx.user_id, new_tx.reference_id)
                if existing is None:
                    raise
                raise DuplicateReference(
                    existing=existing,
                    user_id=new_tx.user_id,
                    reference_id=new_tx.reference_id,
                ) from exc

        return tx.to_info()

    def find_transaction(self, user_id: str, reference_id: str) -> TransactionInfo | None:
        with _store_errors("find_transaction"):
            tx = self._transactions().filter(user_id=user_id, reference_id=reference_id).first()
        return tx.to_info() if tx else None

    def list_transactions(
        self,
        user_id: str,
        limit: int,
        offset: int = 0,
    ) -> list[TransactionInfo]:
        check_page(limit, offset)
        with _store_errors("list_transactions"):
            qs = self._transactions().filter(user_id=user_id).order_by("-created_at", "-id")
            return [tx.to_info() for tx in qs[offset:offset + limit]]
