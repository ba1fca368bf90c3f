"""Ledgerman protocols."""

from ledgerman.protocols.store import (
    AccountStore,
    AccountInfo,
    TransactionInfo,
    NewTransaction,
)

__all__ = [
    "AccountStore",
    "AccountInfo",
    "TransactionInfo",
    "NewTransaction",
]
