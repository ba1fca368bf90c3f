"""Pytest fixtures for Ledgerman tests."""

import pytest

from ledgerman.service import LedgerService
from ledgerman.signals import points_awarded, points_redeemed, tier_changed
from ledgerman.stores.memory import InMemoryAccountStore
from ledgerman.stores.orm import DjangoAccountStore
from ledgerman.tests.support import FlakyStore


@pytest.fixture
def memory_store():
    """Process-local store, no database needed."""
    return InMemoryAccountStore()


@pytest.fixture
def ledger(memory_store):
    """LedgerService over the in-memory store."""
    return LedgerService(store=memory_store, retry_backoff=0)


@pytest.fixture
def orm_store(db):
    """Django ORM store on the test database."""
    return DjangoAccountStore()


@pytest.fixture
def orm_ledger(orm_store):
    """LedgerService over the Django ORM store."""
    return LedgerService(store=orm_store, retry_backoff=0)


@pytest.fixture
def funded(orm_ledger):
    """Account with balance 40 / lifetime 100 (award 100, redeem 60)."""
    orm_ledger.award("LED-001", 100, "SIGNUP", "welcome", reference_id="signup:LED-001")
    orm_ledger.redeem("LED-001", 60, "reward")
    return orm_ledger.get_account("LED-001")


@pytest.fixture
def flaky():
    """Factory for FlakyStore wrappers."""
    return FlakyStore


@pytest.fixture
def received():
    """Capture ledger signals sent during a test."""
    events = []

    def on_awarded(sender, **kwargs):
        events.append(("awarded", kwargs))

    def on_redeemed(sender, **kwargs):
        events.append(("redeemed", kwargs))

    def on_tier(sender, **kwargs):
        events.append(("tier", kwargs))

    points_awarded.connect(on_awarded)
    points_redeemed.connect(on_redeemed)
    tier_changed.connect(on_tier)
    yield events
    points_awarded.disconnect(on_awarded)
    points_redeemed.disconnect(on_redeemed)
    tier_changed.disconnect(on_tier)
