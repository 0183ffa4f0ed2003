from datetime import datetime

from flask import Blueprint, request, jsonify, current_app

from models import db
from models.payment import Payment
from models.user import User
from utils.audit import log_event
from utils.membership import days_remaining, effective_status, ensure_user
from utils.profile import PROFILE_FIELDS, missing_profile_fields, profile_required_fields
from utils.validation import clean_text, sanitize_phone, validate_fields

users_bp = Blueprint("users", __name__, url_prefix="/users")


def _user_payload(user: User) -> dict:
    now = datetime.utcnow()
    membership = user.membership_dict()
    membership["effectiveStatus"] = effective_status(user, now)
    membership["daysRemaining"] = days_remaining(user, now)
    missing = missing_profile_fields(user)
    return {
        "uid": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "isCoreMember": user.is_core_member,
        "profile": {field: getattr(user, field) for field in PROFILE_FIELDS},
        "membership": membership,
        "profileComplete": not missing,
        "profileRequiredFields": profile_required_fields(),
        "missingFields": missing,
    }


@users_bp.post("")
def sync_user():
    data = request.get_json(silent=True) or {}
    uid = (data.get("uid") or "").strip() if isinstance(data.get("uid"), str) else ""
    if not uid or len(uid) > 128:
        return jsonify(error="uid required"), 400

    user, created = ensure_user(
        uid,
        email=data.get("email") if isinstance(data.get("email"), str) else None,
        name=data.get("name") if isinstance(data.get("name"), str) else None,
        core_emails=current_app.config.get("CORE_MEMBER_EMAILS", []),
    )
    if created:
        log_event("USER_CREATED", user_id=user.id, entity="user", entity_id=user.id,
                  metadata={"core": user.is_core_member})
    return jsonify(_user_payload(user)), 201 if created else 200


@users_bp.get("/<uid>")
def get_user(uid):
    user = db.session.get(User, uid)
    if not user:
        return jsonify(error="User not found"), 404
    return jsonify(_user_payload(user)), 200


@users_bp.post("/<uid>/profile")
def update_profile(uid):
    user = db.session.get(User, uid)
    if not user:
        return jsonify(error="User not found"), 404

    data = request.get_json(silent=True) or {}
    updates = {
        field: data[field].strip()
        for field in PROFILE_FIELDS
        if isinstance(data.get(field), str)
    }
    if "phone" in updates:
        updates["phone"] = sanitize_phone(updates["phone"])

    valid, errors = validate_fields(updates)
    if not valid:
        return jsonify(error="Invalid profile details", details=errors), 400

    # stored as plain text; checkout escapes registrant fields on the way out
    for field, value in updates.items():
        if field == "usn":
            value = value.upper()
        elif field != "phone":
            value = clean_text(value)
        setattr(user, field, value or None)

    db.session.commit()
    log_event("PROFILE_UPDATE", user_id=user.id, entity="user", entity_id=user.id,
              metadata={"fields": sorted(updates)})
    return jsonify(message="Profile updated", **_user_payload(user)), 200


@users_bp.get("/<uid>/payments")
def list_payments(uid):
    user = db.session.get(User, uid)
    if not user:
        return jsonify(error="User not found"), 404

    rows = (
        Payment.query
        .filter_by(user_id=user.id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .all()
    )
    return jsonify([r.to_dict() for r in rows]), 200
