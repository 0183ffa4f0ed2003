import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import IntegrityError

from models import db
from models.payment import Payment
from models.processed_payment import ProcessedPayment
from models.user import (
    User,
    MEMBERSHIP_ACTIVE,
    MEMBERSHIP_INACTIVE,
    MEMBERSHIP_TYPE_CORE,
    ROLE_CORE,
    ROLE_EXECUTIVE,
    ROLE_MEMBER,
)
from utils.plans import Plan

logger = logging.getLogger(__name__)

EXPIRED = "expired"


def compute_expiry(plan: Plan, now: datetime) -> datetime:
    # Window is anchored on the day before activation, then extended by the
    # plan's whole years. Feb 29 anchors clamp to Feb 28.
    yesterday = now - timedelta(days=1)
    return yesterday + relativedelta(years=plan.duration_years)


def is_membership_current(user: User, now: datetime) -> bool:
    if user.membership_status != MEMBERSHIP_ACTIVE:
        return False
    # core memberships carry no expiry
    if user.membership_expires_at is None:
        return True
    return user.membership_expires_at > now


def effective_status(user: User, now: datetime) -> str:
    if user.membership_status == MEMBERSHIP_ACTIVE and not is_membership_current(user, now):
        return EXPIRED
    return user.membership_status or MEMBERSHIP_INACTIVE


def days_remaining(user: User, now: datetime) -> Optional[int]:
    if user.membership_expires_at is None or not is_membership_current(user, now):
        return None
    return max((user.membership_expires_at - now).days, 0)


def is_payment_applied(user: Optional[User], payment_id: str) -> bool:
    if user is not None and user.membership_payment_id == payment_id:
        return True
    if db.session.query(ProcessedPayment.id).filter_by(payment_id=payment_id).first() is not None:
        return True
    return Payment.query.filter_by(payment_id=payment_id).first() is not None


def _ledger_amount(payment: dict, plan: Plan) -> int:
    amount = int(payment.get("amount") or 0)
    if amount % 100:
        logger.warning("Payment %s amount %s paise is not whole rupees; ledger keeps %s",
                       payment.get("id"), amount, amount // 100)
    elif amount != plan.amount_minor:
        logger.warning("Payment %s amount %s paise differs from %s price %s",
                       payment.get("id"), amount, plan.id, plan.amount_minor)
    return amount // 100


def activate_membership(user_id: str, plan: Plan, payment: dict, *, now: datetime = None,
                        idempotent: bool = True) -> bool:
    """
    Applies a captured payment: marks the membership active for the plan and
    appends one ledger row. The user row is created if it does not exist yet.

    With idempotent=True a payment id that was already applied is skipped,
    including one committed by a concurrent delivery after our check.
    Returns True if anything was written.
    """
    now = now or datetime.utcnow()
    payment_id = payment.get("id")

    user = db.session.get(User, user_id)
    if idempotent and payment_id and is_payment_applied(user, payment_id):
        return False

    if user is None:
        user = User(id=user_id, membership_status=MEMBERSHIP_INACTIVE)
        db.session.add(user)

    user.membership_status = MEMBERSHIP_ACTIVE
    user.membership_type = plan.id
    user.membership_start_date = now
    user.membership_expires_at = compute_expiry(plan, now)
    user.membership_payment_id = payment_id
    user.role = ROLE_EXECUTIVE

    db.session.add(Payment(
        user_id=user_id,
        payment_id=payment_id,
        order_id=payment.get("order_id"),
        amount=_ledger_amount(payment, plan),
        currency=payment.get("currency") or "INR",
        status="success",
        plan_id=plan.id,
        created_at=now,
    ))
    if idempotent and payment_id:
        db.session.add(ProcessedPayment(payment_id=payment_id, processed_at=now))

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        claimed = db.session.query(ProcessedPayment.id).filter_by(payment_id=payment_id).first()
        if idempotent and payment_id and claimed is not None:
            logger.info("Payment %s was applied by a concurrent delivery", payment_id)
            return False
        raise
    return True


def _grant_core(user: User) -> None:
    user.role = ROLE_CORE
    user.is_core_member = True
    user.membership_status = MEMBERSHIP_ACTIVE
    user.membership_type = MEMBERSHIP_TYPE_CORE


def ensure_user(uid: str, email: str = None, name: str = None, core_emails=()) -> Tuple[User, bool]:
    """
    Sign-in sync. Creates the record on first sight; core member emails get
    an active "core" membership. Returns (user, created).
    """
    email_norm = (email or "").strip().lower() or None
    is_core = bool(email_norm) and email_norm in set(core_emails or ())

    user = db.session.get(User, uid)
    if user is None:
        user = User(
            id=uid,
            email=email_norm,
            name=(name or "").strip() or None,
            role=ROLE_MEMBER,
            membership_status=MEMBERSHIP_INACTIVE,
        )
        if is_core:
            _grant_core(user)
        db.session.add(user)
        db.session.commit()
        return user, True

    if is_core and user.role != ROLE_CORE:
        _grant_core(user)
        db.session.commit()
    return user, False


def promote_to_core(user: User) -> None:
    _grant_core(user)
    db.session.commit()
