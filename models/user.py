from datetime import datetime
from models.db import db

MEMBERSHIP_INACTIVE = "inactive"
MEMBERSHIP_ACTIVE = "active"
MEMBERSHIP_TYPE_CORE = "core"

ROLE_MEMBER = "member"
ROLE_CORE = "coreMember"
ROLE_EXECUTIVE = "EXECUTIVE MEMBER"

class User(db.Model):
    __tablename__ = "users"

    # stable id issued by the identity provider
    id = db.Column(db.String(128), primary_key=True)

    email = db.Column(db.String(255), nullable=True, index=True)
    name = db.Column(db.String(120), nullable=True)
    role = db.Column(db.String(40), nullable=False, default=ROLE_MEMBER)
    is_core_member = db.Column(db.Boolean, default=False, nullable=False)

    # profile
    phone = db.Column(db.String(20), nullable=True)
    branch = db.Column(db.String(80), nullable=True)
    year = db.Column(db.String(10), nullable=True)
    usn = db.Column(db.String(20), nullable=True)
    bio = db.Column(db.String(500), nullable=True)

    # membership sub-record
    membership_status = db.Column(db.String(20), nullable=False, default=MEMBERSHIP_INACTIVE)
    membership_type = db.Column(db.String(40), nullable=True)   # plan id, or "core"
    membership_start_date = db.Column(db.DateTime, nullable=True)
    membership_expires_at = db.Column(db.DateTime, nullable=True)
    # last payment applied by the webhook
    membership_payment_id = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def membership_dict(self) -> dict:
        return {
            "status": self.membership_status,
            "type": self.membership_type,
            "startDate": self.membership_start_date.isoformat() if self.membership_start_date else None,
            "expiresAt": self.membership_expires_at.isoformat() if self.membership_expires_at else None,
        }
