"""Ledgerman models."""

from ledgerman.models.points_account import PointsAccount
from ledgerman.models.points_transaction import PointsTransaction

__all__ = [
    "PointsAccount",
    "PointsTransaction",
]
