import razorpay
from flask import current_app


def init_razorpay(app):
    """
    Registers a Razorpay client on the app. Tests (or other gateways with the
    same `order.create` shape) can pre-populate app.extensions["razorpay_client"].
    """
    if app.extensions.get("razorpay_client") is not None:
        return app.extensions["razorpay_client"]

    key_id = app.config.get("RAZORPAY_KEY_ID")
    key_secret = app.config.get("RAZORPAY_KEY_SECRET")
    client = None
    if key_id and key_secret:
        client = razorpay.Client(auth=(key_id, key_secret))
    app.extensions["razorpay_client"] = client
    return client


def get_razorpay_client():
    return current_app.extensions.get("razorpay_client")
