from .db import db
from .user import User
from .payment import Payment
from .audit_log import AuditLog
from .processed_payment import ProcessedPayment
