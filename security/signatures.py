import razorpay
from razorpay.errors import SignatureVerificationError

# Razorpay signs the two callback shapes differently. Keep these separate.


def _utility(secret: str):
    # the SDK reads the key secret from the client's auth pair
    return razorpay.Client(auth=("", secret)).utility


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """
    Checkout handler callback: HMAC-SHA256(key_secret, "<order_id>|<payment_id>").
    """
    if not order_id or not payment_id or not signature or not secret:
        return False
    try:
        _utility(secret).verify_payment_signature({
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": str(signature),
        })
        return True
    except SignatureVerificationError:
        return False


def verify_webhook_signature(raw_body: bytes, signature: str, secret: str) -> bool:
    """
    Webhook delivery: HMAC-SHA256(webhook_secret, raw request body).
    The body must be the exact bytes received, not a re-serialized copy.
    """
    if raw_body is None or not signature or not secret:
        return False
    if isinstance(raw_body, bytes):
        try:
            raw_body = raw_body.decode("utf-8")
        except UnicodeDecodeError:
            return False
    try:
        _utility(secret).verify_webhook_signature(raw_body, str(signature), secret)
        return True
    except SignatureVerificationError:
        return False
