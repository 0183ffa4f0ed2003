import math
from typing import Callable

from utils.errors import RateLimited, ValidationError
from utils.plans import require_plan
from utils.validation import sanitize_fields, validate_registrant


class CheckoutInitiator:
    """
    Prepares everything the browser needs to open the Razorpay overlay:
    rate limit, registrant validation, order creation, checkout options.

    Card data never passes through here; the overlay talks to Razorpay
    directly. The handler's signature check on /verify-payment only drives
    UI feedback; the webhook is what activates the membership.
    """

    def __init__(self, limiter, create_order: Callable[..., dict], *, brand_name: str,
                 logo_url: str = None, theme_color: str = None):
        self.limiter = limiter
        self.create_order = create_order
        self.brand_name = brand_name
        self.logo_url = logo_url
        self.theme_color = theme_color

    def start(self, user_id: str, plan_id: str, fields: dict) -> dict:
        plan = require_plan(plan_id)

        allowed, retry_after = self.limiter.check(user_id)
        if not allowed:
            minutes = max(1, math.ceil(retry_after / 60))
            raise RateLimited(
                retry_after,
                f"Too many payment attempts. Please wait {minutes} minutes.",
            )

        valid, errors = validate_registrant(fields)
        if not valid:
            raise ValidationError(errors)

        registrant = sanitize_fields(fields)
        order = self.create_order(plan.id, user_id)

        options = {
            "key": order["keyId"],
            "amount": order["amount"],
            "currency": order["currency"],
            "name": self.brand_name,
            "description": f"{plan.name} - {plan.duration}",
            "order_id": order["orderId"],
            "prefill": {
                "name": registrant.get("name"),
                "email": registrant.get("email"),
                "contact": registrant.get("phone"),
            },
            "notes": {
                "userId": user_id,
                "planId": plan.id,
            },
        }
        if self.logo_url:
            options["image"] = self.logo_url
        if self.theme_color:
            options["theme"] = {"color": self.theme_color}
        return options
