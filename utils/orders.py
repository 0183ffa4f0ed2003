import logging
import time
from datetime import datetime

from models import db
from models.user import User
from utils.errors import ActiveMembershipExists, OrderCreationFailed
from utils.membership import is_membership_current
from utils.plans import require_plan

logger = logging.getLogger(__name__)


def create_membership_order(plan_id, user_id, *, client, key_id, currency="INR",
                            block_active=True, now=None) -> dict:
    """
    Mints a Razorpay order for a membership plan.

    The amount always comes from the plan catalog; nothing the client sends
    is used for pricing. The order notes carry userId/planId/planName so the
    webhook can recover them without a lookup table.
    """
    plan = require_plan(plan_id)

    if block_active and user_id:
        user = db.session.get(User, str(user_id))
        if user is not None and is_membership_current(user, now or datetime.utcnow()):
            raise ActiveMembershipExists()

    if client is None or not key_id:
        raise OrderCreationFailed("Payment gateway not configured")

    options = {
        "amount": plan.amount_minor,
        "currency": currency,
        "receipt": f"order_{int(time.time() * 1000)}",
        "notes": {
            "userId": user_id,
            "planId": plan.id,
            "planName": plan.name,
        },
    }

    try:
        order = client.order.create(options)
    except Exception as exc:
        logger.error("Razorpay order creation failed for plan %s: %s", plan.id, exc)
        raise OrderCreationFailed() from exc

    return {
        "orderId": order["id"],
        "amount": order["amount"],
        "currency": order["currency"],
        "keyId": key_id,
    }
