from flask import current_app

from models.user import User

PROFILE_FIELDS = ("name", "phone", "branch", "year", "usn", "bio")
_DEFAULT_REQUIRED = ["name", "phone", "branch", "year", "usn"]


def profile_required_fields():
    fields = current_app.config.get("PROFILE_REQUIRED_FIELDS", _DEFAULT_REQUIRED)
    if not isinstance(fields, (list, tuple)):
        return list(_DEFAULT_REQUIRED)
    return [f for f in fields if isinstance(f, str)]


def missing_profile_fields(user: User):
    missing = []
    for field in profile_required_fields():
        value = getattr(user, field, None)
        if not isinstance(value, str) or not value.strip():
            missing.append(field)
    return missing


def registrant_fields(user: User) -> dict:
    return {
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "branch": user.branch,
        "year": user.year,
        "usn": user.usn,
    }
