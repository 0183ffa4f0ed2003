import logging
from functools import partial

from flask import Blueprint, request, jsonify, current_app

from models import db
from models.user import User
from security.rate_limit import get_rate_limiter
from security.signatures import verify_payment_signature
from utils.audit import log_event
from utils.checkout import CheckoutInitiator
from utils.errors import (
    ActiveMembershipExists,
    InvalidPlan,
    MembershipError,
    OrderCreationFailed,
    RateLimited,
    ValidationError,
)
from utils.orders import create_membership_order
from utils.plans import list_plans, require_plan
from utils.profile import missing_profile_fields, registrant_fields
from utils.razorpay_client import get_razorpay_client

logger = logging.getLogger(__name__)

payments_bp = Blueprint("payments", __name__)


def _order_creator():
    cfg = current_app.config
    return partial(
        create_membership_order,
        client=get_razorpay_client(),
        key_id=cfg.get("RAZORPAY_KEY_ID"),
        currency=cfg.get("RAZORPAY_CURRENCY", "INR"),
        block_active=cfg.get("BLOCK_ACTIVE_MEMBER_ORDERS", True),
    )


def _fail(exc: MembershipError, **extra):
    return jsonify(error=exc.message, **extra), exc.status_code


@payments_bp.get("/plans")
def plans():
    return jsonify([p.to_dict() for p in list_plans()]), 200


@payments_bp.post("/create-order")
def create_order():
    data = request.get_json(silent=True) or {}
    plan_id = data.get("planId")
    user_id = data.get("userId")

    try:
        plan = require_plan(plan_id)
    except InvalidPlan as exc:
        return _fail(exc)

    if not isinstance(user_id, str) or not user_id.strip():
        return jsonify(error="userId required"), 400

    try:
        order = _order_creator()(plan.id, user_id)
    except ActiveMembershipExists as exc:
        log_event("ORDER_REJECTED_ACTIVE", user_id=user_id, entity="user", entity_id=user_id,
                  metadata={"planId": plan_id})
        return _fail(exc)
    except OrderCreationFailed as exc:
        log_event("ORDER_CREATE_FAILED", user_id=user_id, metadata={"planId": plan_id, "reason": exc.message})
        return _fail(OrderCreationFailed())

    log_event("ORDER_CREATED", user_id=user_id, entity="order", entity_id=order["orderId"],
              metadata={"planId": plan_id, "amount": order["amount"]})
    return jsonify(order), 200


@payments_bp.post("/verify-payment")
def verify_payment():
    # Verdict only. Activation happens in the webhook, never here.
    data = request.get_json(silent=True) or {}
    order_id = data.get("razorpay_order_id")
    payment_id = data.get("razorpay_payment_id")
    signature = data.get("razorpay_signature")

    secret = current_app.config.get("RAZORPAY_KEY_SECRET")
    if not secret:
        return jsonify(verified=False, error="Payment verification not configured"), 500

    if verify_payment_signature(order_id, payment_id, signature, secret):
        logger.info("Payment %s verified for order %s", payment_id, order_id)
        return jsonify(verified=True), 200

    logger.warning("Payment verification failed for order %s", order_id)
    return jsonify(verified=False, error="Invalid signature"), 400


@payments_bp.post("/checkout")
def start_checkout():
    data = request.get_json(silent=True) or {}
    user_id = data.get("userId")
    plan_id = data.get("planId")

    user = db.session.get(User, user_id) if isinstance(user_id, str) and user_id else None
    if user is None:
        return jsonify(error="Please sign in to continue"), 401

    missing = missing_profile_fields(user)
    if missing:
        return jsonify(
            error=f"Please complete your profile. Missing: {', '.join(missing)}",
            missing_fields=missing,
        ), 400

    cfg = current_app.config
    initiator = CheckoutInitiator(
        get_rate_limiter(),
        _order_creator(),
        brand_name=cfg.get("CHECKOUT_BRAND_NAME", "CSI NMAMIT"),
        logo_url=cfg.get("CHECKOUT_LOGO_URL"),
        theme_color=cfg.get("CHECKOUT_THEME_COLOR"),
    )

    try:
        options = initiator.start(user.id, plan_id, registrant_fields(user))
    except RateLimited as exc:
        log_event("CHECKOUT_RATE_LIMIT", user_id=user.id, metadata={"retry_after": exc.retry_after})
        return _fail(exc, retry_after_seconds=exc.retry_after)
    except ValidationError as exc:
        return _fail(exc, details=exc.errors)
    except ActiveMembershipExists as exc:
        log_event("ORDER_REJECTED_ACTIVE", user_id=user.id, entity="user", entity_id=user.id,
                  metadata={"planId": plan_id})
        return _fail(exc)
    except OrderCreationFailed as exc:
        log_event("ORDER_CREATE_FAILED", user_id=user.id, metadata={"planId": plan_id, "reason": exc.message})
        return _fail(OrderCreationFailed())
    except InvalidPlan as exc:
        return _fail(exc)

    log_event("ORDER_CREATED", user_id=user.id, entity="order", entity_id=options["order_id"],
              metadata={"planId": plan_id, "amount": options["amount"]})
    return jsonify(options), 200
