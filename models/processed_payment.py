from datetime import datetime
from models.db import db

class ProcessedPayment(db.Model):
    """One row per applied payment id. The unique index makes redelivery dedup hold across workers."""
    __tablename__ = "processed_payments"

    id = db.Column(db.Integer, primary_key=True)
    payment_id = db.Column(db.String(64), nullable=False, unique=True, index=True)
    processed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
