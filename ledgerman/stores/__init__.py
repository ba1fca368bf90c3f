"""Account store implementations.

- ledgerman.stores.orm: DjangoAccountStore (default, durable)
- ledgerman.stores.memory: InMemoryAccountStore (process-local)
"""

from django.utils.module_loading import import_string

from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgermanError
from ledgerman.protocols.store import AccountStore


def get_store() -> AccountStore:
    """Instantiate the configured STORE_BACKEND."""
    backend_class = import_string(ledgerman_settings.STORE_BACKEND)
    return backend_class()


def check_page(limit: int, offset: int) -> None:
    """Reject negative paging arguments before they reach a slice."""
    if limit < 0 or offset < 0:
        raise LedgermanError("INVALID_PAGE", limit=limit, offset=offset)
