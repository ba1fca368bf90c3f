"""
Ledgerman signals — public event API.

Emitted signals (sent by LedgerService once the outermost transaction
commits; never for a unit that is rolled back):
- points_awarded: user_id, account, transaction
- points_redeemed: user_id, account, transaction
- tier_changed: user_id, previous_tier, tier
"""

from django.dispatch import Signal

points_awarded = Signal()  # sender=LedgerService
points_redeemed = Signal()  # sender=LedgerService
tier_changed = Signal()  # sender=LedgerService
