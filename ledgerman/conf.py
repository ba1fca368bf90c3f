"""
Ledgerman configuration.

Usage in settings.py:
    LEDGERMAN = {
        "MAX_RETRIES": 5,
        "DEFAULT_HISTORY_LIMIT": 50,
        "ACTIONS": {"REFERRAL": {"points": 250, "description": "Referred a friend"}},
    }
"""

from dataclasses import dataclass, field
from typing import Any

from django.conf import settings


@dataclass
class LedgermanSettings:
    """Ledgerman configuration settings."""

    # AccountStore implementation (dotted path)
    STORE_BACKEND: str = "ledgerman.stores.orm.DjangoAccountStore"

    # Optimistic concurrency retry policy
    MAX_RETRIES: int = 5
    RETRY_BACKOFF: float = 0.01

    # History queries
    DEFAULT_HISTORY_LIMIT: int = 50

    # Action catalog overrides: {"CODE": {"points": int, "description": str}}
    ACTIONS: dict[str, dict] = field(default_factory=dict)


def get_ledgerman_settings() -> LedgermanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "LEDGERMAN", {})
    return LedgermanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_ledgerman_settings(), name)


ledgerman_settings = _LazySettings()
