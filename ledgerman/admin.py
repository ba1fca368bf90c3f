"""Ledgerman admin: read-only views over accounts and the ledger."""

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from django.utils.http import urlencode

from ledgerman.models import PointsAccount, PointsTransaction
from ledgerman.tiers import points_to_next_tier

TIER_COLORS = {
    "bronze": "#cd7f32",
    "silver": "#c0c0c0",
    "gold": "#ffd700",
    "platinum": "#e5e4e2",
}


@admin.register(PointsAccount)
class PointsAccountAdmin(admin.ModelAdmin):
    list_display = [
        "user_id",
        "points_balance",
        "lifetime_points",
        "tier_badge",
        "next_tier_gap",
        "transactions_link",
        "updated_at",
    ]
    list_filter = ["tier"]
    search_fields = ["user_id"]
    readonly_fields = [
        "user_id",
        "points_balance",
        "lifetime_points",
        "tier",
        "version",
        "created_at",
        "updated_at",
    ]

    # Balances only change through LedgerService.
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Tier")
    def tier_badge(self, obj):
        color = TIER_COLORS.get(obj.tier, "#6c757d")
        text_color = "#000" if obj.tier in ("gold", "silver", "platinum") else "#fff"
        return format_html(
            '<span style="background:{}; color:{}; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            color,
            text_color,
            obj.get_tier_display(),
        )

    @admin.display(description="To next tier")
    def next_tier_gap(self, obj):
        return points_to_next_tier(obj)

    @admin.display(description="Transactions")
    def transactions_link(self, obj):
        url = reverse("admin:ledgerman_pointstransaction_changelist")
        query = urlencode({"user_id": obj.user_id})
        return format_html('<a href="{}?{}">history</a>', url, query)


@admin.register(PointsTransaction)
class PointsTransactionAdmin(admin.ModelAdmin):
    list_display = [
        "created_at",
        "user_id",
        "transaction_type",
        "points_display",
        "balance_after",
        "description",
        "reference_id",
    ]
    list_filter = ["transaction_type"]
    search_fields = ["user_id", "description", "reference_id"]
    readonly_fields = [
        "user_id",
        "points_amount",
        "transaction_type",
        "description",
        "reference_id",
        "balance_after",
        "created_at",
    ]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.display(description="Points")
    def points_display(self, obj):
        if obj.points_amount > 0:
            return format_html('<span style="color:green">+{}</span>', obj.points_amount)
        return format_html('<span style="color:red">{}</span>', obj.points_amount)
