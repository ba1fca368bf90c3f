"""PointsAccount model (one spendable balance per user)."""

from django.db import models
from django.utils.translation import gettext_lazy as _

from ledgerman.protocols.store import AccountInfo
from ledgerman.tiers import Tier


class PointsAccount(models.Model):
    """
    Loyalty points account.

    One account per user. Tracks the spendable balance, lifetime points
    (never decreases) and the tier derived from lifetime points.

    Rules:
    - Created lazily on first access (0 / 0 / Bronze)
    - Never deleted by the ledger
    - ``version`` increments on every balance mutation (optimistic concurrency)
    - ``tier`` is rewritten from ``lifetime_points`` on every mutation
    """

    user_id = models.CharField(
        _("user id"),
        max_length=128,
        unique=True,
        help_text=_("Opaque identifier from the external user registry"),
    )

    points_balance = models.BigIntegerField(
        _("points balance"),
        default=0,
        help_text=_("Points available for redemption"),
    )
    lifetime_points = models.BigIntegerField(
        _("lifetime points"),
        default=0,
        help_text=_("Total points ever awarded (never decreases)"),
    )
    tier = models.CharField(
        _("tier"),
        max_length=20,
        choices=Tier.choices,
        default=Tier.BRONZE,
    )

    version = models.PositiveIntegerField(_("version"), default=0)

    created_at = models.DateTimeField(_("created at"), auto_now_add=True)
    updated_at = models.DateTimeField(_("updated at"), auto_now=True)

    class Meta:
        db_table = "ledgerman_points_account"
        verbose_name = _("points account")
        verbose_name_plural = _("points accounts")
        constraints = [
            models.CheckConstraint(
                condition=models.Q(points_balance__gte=0),
                name="ledgerman_balance_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(lifetime_points__gte=0),
                name="ledgerman_lifetime_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.user_id}: {self.points_balance}pts | {self.tier}"

    def to_info(self) -> AccountInfo:
        return AccountInfo(
            user_id=self.user_id,
            points_balance=self.points_balance,
            lifetime_points=self.lifetime_points,
            tier=self.tier,
            version=self.version,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
