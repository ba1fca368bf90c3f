# Generated migration for PointsAccount and PointsTransaction

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PointsAccount",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "user_id",
                    models.CharField(
                        help_text="Opaque identifier from the external user registry",
                        max_length=128,
                        unique=True,
                        verbose_name="user id",
                    ),
                ),
                (
                    "points_balance",
                    models.BigIntegerField(
                        default=0,
                        help_text="Points available for redemption",
                        verbose_name="points balance",
                    ),
                ),
                (
                    "lifetime_points",
                    models.BigIntegerField(
                        default=0,
                        help_text="Total points ever awarded (never decreases)",
                        verbose_name="lifetime points",
                    ),
                ),
                (
                    "tier",
                    models.CharField(
                        choices=[
                            ("bronze", "Bronze"),
                            ("silver", "Silver"),
                            ("gold", "Gold"),
                            ("platinum", "Platinum"),
                        ],
                        default="bronze",
                        max_length=20,
                        verbose_name="tier",
                    ),
                ),
                ("version", models.PositiveIntegerField(default=0, verbose_name="version")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "points account",
                "verbose_name_plural": "points accounts",
                "db_table": "ledgerman_points_account",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(points_balance__gte=0),
                        name="ledgerman_balance_non_negative",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(lifetime_points__gte=0),
                        name="ledgerman_lifetime_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PointsTransaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("user_id", models.CharField(db_index=True, max_length=128, verbose_name="user id")),
                (
                    "points_amount",
                    models.BigIntegerField(
                        help_text="Positive for awards, negative for redemptions",
                        verbose_name="points",
                    ),
                ),
                (
                    "transaction_type",
                    models.CharField(
                        help_text="Action tag (SIGNUP, PRODUCT_REVIEW, REDEMPTION, ...)",
                        max_length=50,
                        verbose_name="type",
                    ),
                ),
                ("description", models.CharField(max_length=255, verbose_name="description")),
                (
                    "reference_id",
                    models.CharField(
                        blank=True,
                        help_text="Idempotency key of the upstream event (ex: order:123)",
                        max_length=128,
                        null=True,
                        verbose_name="reference",
                    ),
                ),
                (
                    "balance_after",
                    models.BigIntegerField(
                        help_text="Points balance after this transaction",
                        verbose_name="balance after",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at"),
                ),
            ],
            options={
                "verbose_name": "points transaction",
                "verbose_name_plural": "points transactions",
                "db_table": "ledgerman_points_transaction",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(
                        fields=["user_id", "-created_at"],
                        name="ledgerman_tx_user_created_idx",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(reference_id__isnull=False),
                        fields=("user_id", "reference_id"),
                        name="ledgerman_unique_user_reference",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(points_amount=0, _negated=True),
                        name="ledgerman_amount_non_zero",
                    ),
                ],
            },
        ),
    ]
