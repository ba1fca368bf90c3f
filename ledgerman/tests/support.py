"""Test doubles and assertions shared by the ledger tests."""

from contextlib import contextmanager

from ledgerman.protocols.store import NewTransaction
from ledgerman.tiers import tier_for


def assert_conserved(ledger, user_id: str):
    """Balance equals the sum of the transaction log; lifetime equals the sum of awards."""
    account = ledger.store.get_account(user_id)
    history = ledger.history(user_id, limit=10_000)
    assert sum(tx.points_amount for tx in history) == account.points_balance
    assert sum(tx.points_amount for tx in history if tx.points_amount > 0) == account.lifetime_points
    assert account.points_balance >= 0
    assert account.tier == tier_for(account.lifetime_points)


class FlakyStore:
    """
    Wraps a store and makes selected operations fail a number of times.

    Usage:
        store = FlakyStore(InMemoryAccountStore(), apply_delta=[VersionConflict()])
    """

    def __init__(self, inner, **failures):
        self.inner = inner
        self.failures = {name: list(errors) for name, errors in failures.items()}
        self.calls: dict[str, int] = {}

    def __getattr__(self, name):
        target = getattr(self.inner, name)
        if not callable(target):
            return target

        def wrapper(*args, **kwargs):
            self.calls[name] = self.calls.get(name, 0) + 1
            pending = self.failures.get(name)
            if pending:
                raise pending.pop(0)
            return target(*args, **kwargs)

        return wrapper


class RacingStore:
    """
    Commits a competing write right before the first unit of work opens.

    The first account read inside that unit returns the pre-race snapshot,
    so the engine's first apply_delta hits a real VersionConflict.
    """

    def __init__(self, inner, user_id, race):
        self.inner = inner
        self.user_id = user_id
        self.race = race
        self.stale = None
        self.units = 0

    def __getattr__(self, name):
        return getattr(self.inner, name)

    @contextmanager
    def atomic(self):
        self.units += 1
        if self.race is not None:
            self.stale = self.inner.get_or_create_account(self.user_id)
            race, self.race = self.race, None
            race(self.inner)
        with self.inner.atomic():
            yield

    def get_or_create_account(self, user_id):
        if self.stale is not None:
            stale, self.stale = self.stale, None
            return stale
        return self.inner.get_or_create_account(user_id)


def competing_write(user_id, points_delta, lifetime_delta, transaction_type):
    """Race callback applying one delta + transaction, as another worker would."""

    def race(store):
        with store.atomic():
            account = store.get_or_create_account(user_id)
            updated = store.apply_delta(user_id, points_delta, lifetime_delta, account.version)
            store.append_transaction(
                NewTransaction(
                    user_id=user_id,
                    points_amount=points_delta,
                    transaction_type=transaction_type,
                    description="other worker",
                    balance_after=updated.points_balance,
                )
            )

    return race
