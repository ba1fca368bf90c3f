"""Ledger audit: reconcile stored accounts against their transaction log.

Checks, per account:
- conservation: points_balance == sum(points_amount)
- lifetime: lifetime_points == sum of positive points_amount
- tier: tier == tier_for(lifetime_points)
- balance: points_balance >= 0

Read-only. The caller decides what to do with findings.
"""

import logging
from dataclasses import dataclass

from django.db.models import Q, Sum

from ledgerman.models import PointsAccount, PointsTransaction
from ledgerman.tiers import tier_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditFinding:
    """One invariant violation for one account."""

    user_id: str
    check: str
    expected: int | str
    actual: int | str

    def __str__(self):
        return f"{self.user_id}: {self.check} expected={self.expected} actual={self.actual}"


def audit_accounts(user_ids: list[str] | None = None, using: str = "default") -> list[AuditFinding]:
    """Audit all accounts (or only ``user_ids``)."""
    accounts = PointsAccount.objects.using(using).order_by("user_id")
    transactions = PointsTransaction.objects.using(using)
    if user_ids:
        accounts = accounts.filter(user_id__in=user_ids)
        transactions = transactions.filter(user_id__in=user_ids)

    totals = {
        row["user_id"]: row
        for row in transactions.order_by()
        .values("user_id")
        .annotate(
            total=Sum("points_amount"),
            earned=Sum("points_amount", filter=Q(points_amount__gt=0)),
        )
    }

    findings: list[AuditFinding] = []
    for account in accounts:
        row = totals.get(account.user_id, {})
        total = row.get("total") or 0
        earned = row.get("earned") or 0
        expected_tier = str(tier_for(max(account.lifetime_points, 0)))

        checks = [
            ("conservation", total, account.points_balance),
            ("lifetime", earned, account.lifetime_points),
            ("tier", expected_tier, account.tier),
        ]
        for check, expected, actual in checks:
            if expected != actual:
                findings.append(AuditFinding(account.user_id, check, expected, actual))
        if account.points_balance < 0:
            findings.append(AuditFinding(account.user_id, "balance", 0, account.points_balance))

    for finding in findings:
        logger.warning("[ledgerman] audit finding: %s", finding)
    return findings
