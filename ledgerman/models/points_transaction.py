"""PointsTransaction model — append-only ledger entries."""

from django.db import models
from django.utils.translation import gettext_lazy as _

from ledgerman.protocols.store import TransactionInfo


class PointsTransaction(models.Model):
    """
    Immutable record of a balance change.

    Every award and redemption is logged here. Transactions are
    append-only: never modified or deleted. The sum of a user's
    ``points_amount`` equals the account's ``points_balance``.
    """

    user_id = models.CharField(_("user id"), max_length=128, db_index=True)

    points_amount = models.BigIntegerField(
        _("points"),
        help_text=_("Positive for awards, negative for redemptions"),
    )
    transaction_type = models.CharField(
        _("type"),
        max_length=50,
        help_text=_("Action tag (SIGNUP, PRODUCT_REVIEW, REDEMPTION, ...)"),
    )
    description = models.CharField(_("description"), max_length=255)
    reference_id = models.CharField(
        _("reference"),
        max_length=128,
        null=True,
        blank=True,
        help_text=_("Idempotency key of the upstream event (ex: order:123)"),
    )
    balance_after = models.BigIntegerField(
        _("balance after"),
        help_text=_("Points balance after this transaction"),
    )

    created_at = models.DateTimeField(_("created at"), auto_now_add=True, db_index=True)

    class Meta:
        db_table = "ledgerman_points_transaction"
        verbose_name = _("points transaction")
        verbose_name_plural = _("points transactions")
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["user_id", "-created_at"], name="ledgerman_tx_user_created_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "reference_id"],
                condition=models.Q(reference_id__isnull=False),
                name="ledgerman_unique_user_reference",
            ),
            models.CheckConstraint(
                condition=~models.Q(points_amount=0),
                name="ledgerman_amount_non_zero",
            ),
        ]

    def __str__(self):
        sign = "+" if self.points_amount > 0 else ""
        return f"{sign}{self.points_amount}pts — {self.description}"

    def to_info(self) -> TransactionInfo:
        return TransactionInfo(
            id=self.pk,
            user_id=self.user_id,
            points_amount=self.points_amount,
            transaction_type=self.transaction_type,
            description=self.description,
            reference_id=self.reference_id,
            balance_after=self.balance_after,
            created_at=self.created_at,
        )
