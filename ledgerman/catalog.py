"""Points action catalog: how many points each upstream action is worth.

Configuration, not ledger logic: LedgerService.award() takes the amount
from its caller and never reads this table. award_action() is the
convenience that does the lookup.

Override or extend entries in settings.py:
    LEDGERMAN = {
        "ACTIONS": {
            "REFERRAL": {"points": 250, "description": "Referred a friend"},
        },
    }
"""

from dataclasses import dataclass

from ledgerman.conf import ledgerman_settings
from ledgerman.exceptions import LedgermanError


@dataclass(frozen=True)
class PointsAction:
    """Points awarded for one unit of an action."""

    code: str
    points: int
    description: str

    def points_for(self, quantity: int = 1) -> int:
        """Points for ``quantity`` units (e.g. currency units of a purchase)."""
        return self.points * quantity


DEFAULT_ACTIONS: dict[str, PointsAction] = {
    action.code: action
    for action in [
        PointsAction("SIGNUP", 100, "Welcome bonus for joining"),
        PointsAction("SKIN_SURVEY", 50, "Completed skin assessment"),
        PointsAction("PRODUCT_REVIEW", 25, "Wrote a product review"),
        PointsAction("COMMUNITY_POST", 15, "Created a community post"),
        PointsAction("ROUTINE_CREATED", 30, "Created a skincare routine"),
        PointsAction("ROUTINE_LOGGED", 5, "Logged daily routine"),
        PointsAction("PRODUCT_PURCHASE", 1, "Points per currency unit spent"),
        PointsAction("REFERRAL", 200, "Referred a friend who signed up"),
        PointsAction("INGREDIENT_SEARCH", 10, "Researched an ingredient"),
        PointsAction("PROFILE_COMPLETE", 75, "Completed profile information"),
        PointsAction("MONTHLY_ACTIVE", 50, "Active user bonus"),
    ]
}


def get_actions() -> dict[str, PointsAction]:
    """Default catalog merged with LEDGERMAN["ACTIONS"] overrides."""
    actions = dict(DEFAULT_ACTIONS)
    for code, override in ledgerman_settings.ACTIONS.items():
        base = actions.get(code)
        actions[code] = PointsAction(
            code=code,
            points=override.get("points", base.points if base else 0),
            description=override.get("description", base.description if base else code),
        )
    return actions


def get_action(code: str) -> PointsAction:
    """
    Resolve an action by code.

    Raises:
        LedgermanError: UNKNOWN_ACTION if the code is not in the catalog
    """
    try:
        return get_actions()[code]
    except KeyError:
        raise LedgermanError("UNKNOWN_ACTION", action=code) from None
