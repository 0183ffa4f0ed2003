import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> list:
    raw = os.getenv(name, "")
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as membership.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "membership.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Razorpay credentials
    RAZORPAY_KEY_ID = os.getenv("RAZORPAY_KEY_ID")
    RAZORPAY_KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET")
    # Webhook secret is configured separately in the Razorpay dashboard
    RAZORPAY_WEBHOOK_SECRET = os.getenv("RAZORPAY_WEBHOOK_SECRET", os.getenv("WEBHOOK_SECRET"))
    RAZORPAY_CURRENCY = "INR"
    RAZORPAY_CHECKOUT_SCRIPT = "https://checkout.razorpay.com/v1/checkout.js"

    # Checkout overlay branding
    CHECKOUT_BRAND_NAME = os.getenv("CHECKOUT_BRAND_NAME", "CSI NMAMIT")
    CHECKOUT_LOGO_URL = os.getenv("CHECKOUT_LOGO_URL", "/csi-logo.png")
    CHECKOUT_THEME_COLOR = os.getenv("CHECKOUT_THEME_COLOR", "#3b82f6")

    # Refuse new orders for users whose membership is active and unexpired
    BLOCK_ACTIVE_MEMBER_ORDERS = _env_flag("BLOCK_ACTIVE_MEMBER_ORDERS", "true")

    # Apply each captured payment id at most once
    WEBHOOK_IDEMPOTENT = _env_flag("WEBHOOK_IDEMPOTENT", "true")

    # Per-user payment attempt limit (advisory)
    PAYMENT_RATE_MAX_ATTEMPTS = int(os.getenv("PAYMENT_RATE_MAX_ATTEMPTS", "3"))
    PAYMENT_RATE_WINDOW_SECONDS = int(os.getenv("PAYMENT_RATE_WINDOW_SECONDS", "300"))

    # Emails that are granted core membership on sign-in
    CORE_MEMBER_EMAILS = _env_list("CORE_MEMBER_EMAILS")

    # Required before checkout
    PROFILE_REQUIRED_FIELDS = ["name", "phone", "branch", "year", "usn"]

    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    # Basic app settings
    DEBUG = False
