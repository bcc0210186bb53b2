# src/subscription/plans.py
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from config import settings
from errors import NotFound

PREMIUM_FEATURES = [
    "Access to all premium food spots",
    "Write unlimited reviews",
    "Premium user badge",
    "No ads",
]


class SubscriptionPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float
    currency_code: str = settings.SUBSCRIPTION_CURRENCY
    duration_in_days: int
    features: List[str] = Field(default_factory=list)


SUBSCRIPTION_PLANS: List[SubscriptionPlan] = [
    SubscriptionPlan(
        id="monthly",
        name="Monthly Premium",
        price=199,
        duration_in_days=30,
        features=PREMIUM_FEATURES,
    ),
    SubscriptionPlan(
        id="quarterly",
        name="Quarterly Premium",
        price=499,
        duration_in_days=90,
        features=PREMIUM_FEATURES + ["Priority support"],
    ),
    SubscriptionPlan(
        id="yearly",
        name="Yearly Premium",
        price=1499,
        duration_in_days=365,
        features=PREMIUM_FEATURES + ["Priority support", "Early access to new features"],
    ),
]

_PLANS_BY_ID: Dict[str, SubscriptionPlan] = {plan.id: plan for plan in SUBSCRIPTION_PLANS}


def get_plans() -> List[SubscriptionPlan]:
    return list(SUBSCRIPTION_PLANS)


def get_plan_by_id(plan_id: str) -> SubscriptionPlan:
    """Look a plan up in the static catalog."""
    plan = _PLANS_BY_ID.get(plan_id)
    if plan is None:
        raise NotFound("Subscription plan not found")
    return plan
