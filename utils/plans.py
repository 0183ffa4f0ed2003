from dataclasses import dataclass
from typing import Dict, List, Optional

from utils.errors import InvalidPlan


@dataclass(frozen=True)
class Plan:
    id: str
    price: int          # whole rupees
    name: str
    duration: str       # display label
    duration_years: int

    @property
    def amount_minor(self) -> int:
        # Razorpay amounts are in paise
        return self.price * 100

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "price": self.price,
            "name": self.name,
            "duration": self.duration,
            "durationYears": self.duration_years,
        }


MEMBERSHIP_PLANS: Dict[str, Plan] = {
    "one-year": Plan("one-year", 358, "1-Year Executive Membership", "1 Year", 1),
    "two-year": Plan("two-year", 664, "2-Year Executive Membership", "2 Years", 2),
    "three-year": Plan("three-year", 919, "3-Year Executive Membership", "3 Years", 3),
}


def get_plan(plan_id) -> Optional[Plan]:
    if not isinstance(plan_id, str):
        return None
    return MEMBERSHIP_PLANS.get(plan_id)


def require_plan(plan_id) -> Plan:
    plan = get_plan(plan_id)
    if plan is None:
        raise InvalidPlan()
    return plan


def list_plans() -> List[Plan]:
    return list(MEMBERSHIP_PLANS.values())
