from .health import health_bp
from .payments import payments_bp
from .razorpay_webhook import webhook_bp
from .pay_pages import pay_pages_bp
from .users import users_bp
