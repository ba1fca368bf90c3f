"""
Ledgerman public API.

CORE (essential):
    LedgerService().get_account(user_id)           - Get (or lazily create) account
    LedgerService().award(user_id, points, ...)    - Award points
    LedgerService().redeem(user_id, points, ...)   - Redeem points
    LedgerService().history(user_id, limit)        - Transactions, most recent first

CONVENIENCE (helpers):
    LedgerService.points_to_next_tier(account)     - Points missing for next tier
    LedgerService.tier_benefits(tier)              - Cumulative tier benefits
    LedgerService().award_action(user_id, code)    - Award from the action catalog
"""

import logging
import random
import time
from dataclasses import dataclass

from ledgerman.catalog import get_action
from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import (
    DuplicateReference,
    InsufficientBalance,
    InvalidAmount,
    LedgermanError,
    TransientStoreFailure,
    VersionConflict,
)
from ledgerman.protocols.store import AccountInfo, AccountStore, NewTransaction, TransactionInfo
from ledgerman.signals import points_awarded, points_redeemed, tier_changed
from ledgerman.stores import get_store
from ledgerman import tiers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerResult:
    """
    Outcome of an award or redemption.

    ``error`` holds an expected, recoverable failure (InsufficientBalance)
    that was not raised. ``replayed`` is True when the reference_id had
    already been processed; ``transaction`` is then the original one.
    """

    account: AccountInfo
    transaction: TransactionInfo | None = None
    replayed: bool = False
    error: LedgermanError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "LedgerResult":
        """Raise ``error`` if set, otherwise return self."""
        if self.error is not None:
            raise self.error
        return self


# Upper bound for a single award or redemption
MAX_POINTS_AMOUNT = 1_000_000_000


def _validate_amount(points_amount) -> int:
    if isinstance(points_amount, bool) or not isinstance(points_amount, int) or points_amount <= 0:
        raise InvalidAmount(points_amount=points_amount)
    if points_amount > MAX_POINTS_AMOUNT:
        raise InvalidAmount(
            message=f"Points amount cannot exceed {MAX_POINTS_AMOUNT}",
            points_amount=points_amount,
        )
    return points_amount


class LedgerService:
    """
    Loyalty points ledger operations.

    Stateless apart from its store and retry policy: instances can run
    side by side in any number of workers. Every mutation is one
    ``store.atomic()`` unit (account delta + transaction append) inside a
    bounded retry loop. Idempotency and balance checks are re-run on
    every attempt, before anything is written.
    """

    REDEMPTION_TYPE = "REDEMPTION"

    def __init__(
        self,
        store: AccountStore | None = None,
        max_retries: int | None = None,
        retry_backoff: float | None = None,
    ):
        self.store = store if store is not None else get_store()
        self.max_retries = max_retries if max_retries is not None else ledgerman_settings.MAX_RETRIES
        self.retry_backoff = (
            retry_backoff if retry_backoff is not None else ledgerman_settings.RETRY_BACKOFF
        )

    # ======================================================================
    # CORE API
    # ======================================================================

    def get_account(self, user_id: str) -> AccountInfo:
        """
        Get the user's account, creating a zeroed Bronze account on first access.

        Raises:
            TransientStoreFailure: If the store is unavailable
        """
        return self.store.get_or_create_account(user_id)

    def award(
        self,
        user_id: str,
        points_amount: int,
        transaction_type: str,
        description: str,
        reference_id: str | None = None,
    ) -> LedgerResult:
        """
        Award points: balance and lifetime points grow by ``points_amount``.

        Args:
            user_id: Owner of the account
            points_amount: Points to award (must be positive)
            transaction_type: Action tag (SIGNUP, PRODUCT_REVIEW, ...)
            description: Reason for the award
            reference_id: Upstream event id; a repeated id is a no-op replay

        Returns:
            LedgerResult with the updated account and the new transaction

        Raises:
            InvalidAmount: If points_amount is not a positive integer
                no larger than MAX_POINTS_AMOUNT
            TransientStoreFailure: If the store failed or retries ran out
        """
        _validate_amount(points_amount)
        result, previous = self._apply(
            user_id,
            points_delta=points_amount,
            lifetime_delta=points_amount,
            transaction_type=transaction_type,
            description=description,
            reference_id=reference_id,
        )

        if result.ok and not result.replayed:
            logger.info(
                "[ledgerman] awarded %s points to %s (%s), balance=%s",
                points_amount, user_id, transaction_type, result.account.points_balance,
            )
            self._send_on_commit(
                points_awarded,
                user_id=user_id,
                account=result.account,
                transaction=result.transaction,
            )
            self._notify_tier_change(user_id, previous, result.account)
        return result

    def redeem(
        self,
        user_id: str,
        points_amount: int,
        description: str,
        reference_id: str | None = None,
        transaction_type: str = REDEMPTION_TYPE,
    ) -> LedgerResult:
        """
        Redeem points from the balance. Lifetime points and tier never change.

        Args:
            user_id: Owner of the account
            points_amount: Points to redeem (must be positive)
            description: What was redeemed
            reference_id: Upstream event id; a repeated id is a no-op replay
            transaction_type: Tag recorded on the transaction

        Returns:
            LedgerResult; ``error`` is InsufficientBalance (and nothing was
            written) when the balance does not cover the redemption

        Raises:
            InvalidAmount: If points_amount is not a positive integer
                no larger than MAX_POINTS_AMOUNT
            TransientStoreFailure: If the store failed or retries ran out
        """
        _validate_amount(points_amount)
        result, _previous = self._apply(
            user_id,
            points_delta=-points_amount,
            lifetime_delta=0,
            transaction_type=transaction_type,
            description=description,
            reference_id=reference_id,
        )

        if not result.ok:
            logger.info(
                "[ledgerman] redemption of %s points refused for %s: balance=%s",
                points_amount, user_id, result.account.points_balance,
            )
        elif not result.replayed:
            logger.info(
                "[ledgerman] redeemed %s points from %s, balance=%s",
                points_amount, user_id, result.account.points_balance,
            )
            self._send_on_commit(
                points_redeemed,
                user_id=user_id,
                account=result.account,
                transaction=result.transaction,
            )
        return result

    def history(
        self,
        user_id: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[TransactionInfo]:
        """
        Transaction history, most recent first.

        Raises:
            LedgermanError: INVALID_PAGE if offset is negative
        """
        if offset < 0:
            raise LedgermanError("INVALID_PAGE", offset=offset)
        if limit is None:
            limit = ledgerman_settings.DEFAULT_HISTORY_LIMIT
        if limit <= 0:
            return []
        return self.store.list_transactions(user_id, limit, offset)

    # ======================================================================
    # CONVENIENCE
    # ======================================================================

    @staticmethod
    def points_to_next_tier(account) -> int:
        return tiers.points_to_next_tier(account)

    @staticmethod
    def tier_benefits(tier) -> list[str]:
        return tiers.tier_benefits(tier)

    def award_action(
        self,
        user_id: str,
        action_code: str,
        quantity: int = 1,
        reference_id: str | None = None,
        description: str | None = None,
    ) -> LedgerResult:
        """
        Award the catalog amount for an action.

        ``quantity`` multiplies per-unit actions such as PRODUCT_PURCHASE
        (one point per currency unit).

        Raises:
            LedgermanError: UNKNOWN_ACTION for codes missing from the catalog
            InvalidAmount: If the resolved amount is not positive
        """
        action = get_action(action_code)
        return self.award(
            user_id,
            action.points_for(quantity),
            action.code,
            description or action.description,
            reference_id=reference_id,
        )

    # ======================================================================
    # Internals
    # ======================================================================

    def _apply(
        self,
        user_id: str,
        points_delta: int,
        lifetime_delta: int,
        transaction_type: str,
        description: str,
        reference_id: str | None,
    ) -> tuple[LedgerResult, AccountInfo | None]:
        """Retry loop around one atomic read-check-write unit."""
        last_error: LedgermanError | None = None

        for attempt in range(1, self.max_retries + 1):
            try:
                with self.store.atomic():
                    return self._attempt(
                        user_id,
                        points_delta,
                        lifetime_delta,
                        transaction_type,
                        description,
                        reference_id,
                    )
            except DuplicateReference as exc:
                # A concurrent writer committed the same reference first;
                # our unit was rolled back.
                logger.info(
                    "[ledgerman] reference %s already processed for %s (concurrent replay)",
                    reference_id, user_id,
                )
                account = self.store.get_or_create_account(user_id)
                return LedgerResult(account=account, transaction=exc.existing, replayed=True), None
            except (VersionConflict, TransientStoreFailure) as exc:
                last_error = exc
                logger.warning(
                    "[ledgerman] attempt %s/%s for %s failed: %s",
                    attempt, self.max_retries, user_id, exc,
                )
                if attempt < self.max_retries:
                    self._backoff(attempt)

        logger.error(
            "[ledgerman] giving up on %s after %s attempts: %s",
            user_id, self.max_retries, last_error,
        )
        raise TransientStoreFailure(
            message="Ledger update did not complete; safe to retry",
            user_id=user_id,
            attempts=self.max_retries,
        ) from last_error

    def _attempt(
        self,
        user_id: str,
        points_delta: int,
        lifetime_delta: int,
        transaction_type: str,
        description: str,
        reference_id: str | None,
    ) -> tuple[LedgerResult, AccountInfo | None]:
        if reference_id is not None:
            existing = self.store.find_transaction(user_id, reference_id)
            if existing is not None:
                logger.info("[ledgerman] reference %s already processed for %s", reference_id, user_id)
                account = self.store.get_or_create_account(user_id)
                return LedgerResult(account=account, transaction=existing, replayed=True), None

        account = self.store.get_or_create_account(user_id)
        if account.points_balance + points_delta < 0:
            error = InsufficientBalance(
                user_id=user_id,
                available=account.points_balance,
                requested=-points_delta,
            )
            return LedgerResult(account=account, error=error), account

        updated = self.store.apply_delta(user_id, points_delta, lifetime_delta, account.version)
        tx = self.store.append_transaction(
            NewTransaction(
                user_id=user_id,
                points_amount=points_delta,
                transaction_type=transaction_type,
                description=description,
                balance_after=updated.points_balance,
                reference_id=reference_id,
            )
        )
        return LedgerResult(account=updated, transaction=tx), account

    def _backoff(self, attempt: int) -> None:
        if self.retry_backoff > 0:
            time.sleep(self.retry_backoff * attempt * random.uniform(0.5, 1.5))

    def _send_on_commit(self, signal, **kwargs) -> None:
        """Send ``signal`` once the caller's outermost transaction commits."""
        self.store.on_commit(lambda: signal.send(sender=LedgerService, **kwargs))

    def _notify_tier_change(
        self,
        user_id: str,
        previous: AccountInfo | None,
        account: AccountInfo,
    ) -> None:
        if previous is None:
            return
        previous_tier = tiers.tier_for(previous.lifetime_points)
        tier = tiers.tier_for(account.lifetime_points)
        if tier != previous_tier:
            logger.info("[ledgerman] %s moved from %s to %s", user_id, previous_tier, tier)
            self._send_on_commit(
                tier_changed,
                user_id=user_id,
                previous_tier=previous_tier,
                tier=tier,
            )
