from datetime import datetime
from models.db import db

class Payment(db.Model):
    """Ledger row for a captured payment. Rows are never updated."""
    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), db.ForeignKey("users.id"), nullable=False, index=True)

    # Razorpay identifiers
    payment_id = db.Column(db.String(64), nullable=False, index=True)
    order_id = db.Column(db.String(64), nullable=True, index=True)

    amount = db.Column(db.Integer, nullable=False)   # whole rupees
    currency = db.Column(db.String(10), nullable=False, default="INR")

    status = db.Column(db.String(20), nullable=False, default="success")
    plan_id = db.Column(db.String(40), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "paymentId": self.payment_id,
            "orderId": self.order_id,
            "amount": self.amount,
            "currency": self.currency,
            "status": self.status,
            "planId": self.plan_id,
            "createdAt": self.created_at.isoformat(),
        }
