import logging

from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError

from models import db
from security.signatures import verify_webhook_signature
from utils.audit import log_event
from utils.errors import PersistenceFailure
from utils.membership import activate_membership
from utils.plans import get_plan

logger = logging.getLogger(__name__)

webhook_bp = Blueprint("webhook", __name__)

SIGNATURE_HEADER = "X-Razorpay-Signature"

APPLIED = "applied"
DUPLICATE = "duplicate"
IGNORED = "ignored"


def _payment_entity(event: dict) -> dict:
    entity = ((event.get("payload") or {}).get("payment") or {}).get("entity") or {}
    return entity if isinstance(entity, dict) else {}


def _notes(entity: dict) -> dict:
    # Razorpay sends an empty list when an order has no notes
    notes = entity.get("notes") or {}
    return notes if isinstance(notes, dict) else {}


def apply_event(event: dict, idempotent: bool = True) -> str:
    """
    Applies a verified webhook event. Only payment.captured carrying
    userId and planId in its notes changes anything.
    """
    if event.get("event") != "payment.captured":
        return IGNORED

    payment = _payment_entity(event)
    notes = _notes(payment)
    user_id = notes.get("userId")
    plan = get_plan(notes.get("planId"))
    if not user_id or plan is None or not payment.get("id"):
        return IGNORED

    try:
        applied = activate_membership(str(user_id), plan, payment, idempotent=idempotent)
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceFailure() from exc
    return APPLIED if applied else DUPLICATE


def _audit(action: str, **kwargs) -> None:
    # the audit row never decides the webhook's status code
    try:
        log_event(action, **kwargs)
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Audit write failed for %s", action)


@webhook_bp.post("/webhook")
def razorpay_webhook():
    secret = current_app.config.get("RAZORPAY_WEBHOOK_SECRET")
    signature = request.headers.get(SIGNATURE_HEADER)
    payload = request.get_data()

    if not secret:
        return jsonify(error="Webhook secret not configured"), 500

    if not signature:
        _audit("WEBHOOK_SIGNATURE_MISSING", entity="webhook")
        return jsonify(error="Missing signature"), 400

    if not verify_webhook_signature(payload, signature, secret):
        _audit("WEBHOOK_SIGNATURE_MISMATCH", entity="webhook")
        return jsonify(error="Invalid signature"), 400

    event = request.get_json(silent=True, force=True)
    if not isinstance(event, dict):
        event = {}
    event_type = event.get("event")
    payment = _payment_entity(event)

    try:
        outcome = apply_event(event, idempotent=current_app.config.get("WEBHOOK_IDEMPOTENT", True))
    except PersistenceFailure as exc:
        logger.exception("Webhook persistence failed for payment %s", payment.get("id"))
        return jsonify(error=exc.message), exc.status_code

    if outcome == APPLIED:
        notes = _notes(payment)
        _audit(
            "MEMBERSHIP_ACTIVATED",
            user_id=notes.get("userId"),
            entity="payment",
            entity_id=payment.get("id"),
            metadata={"planId": notes.get("planId"), "orderId": payment.get("order_id")},
        )
    elif outcome == DUPLICATE:
        _audit("WEBHOOK_DUPLICATE", entity="payment", entity_id=payment.get("id"))
    else:
        _audit("WEBHOOK_IGNORED", entity="webhook", metadata={"event": event_type})

    return jsonify(status="ok"), 200
