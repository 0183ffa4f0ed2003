"""
Shared fixtures: an app on in-memory SQLite with a fake Razorpay client.
"""

import hashlib
import hmac
import json

import pytest

from app import create_app
from models import db
from models.user import User

KEY_ID = "rzp_test_key"
KEY_SECRET = "rzp_test_secret"
WEBHOOK_SECRET = "whsec_test_secret"


class FakeOrderApi:
    def __init__(self):
        self.calls = []
        self.error = None

    def create(self, data):
        if self.error is not None:
            raise self.error
        self.calls.append(data)
        return {
            "id": f"order_test{len(self.calls)}",
            "entity": "order",
            "amount": data["amount"],
            "currency": data["currency"],
            "receipt": data["receipt"],
            "notes": data["notes"],
            "status": "created",
        }


class FakeRazorpayClient:
    def __init__(self):
        self.order = FakeOrderApi()


@pytest.fixture
def razorpay_client():
    return FakeRazorpayClient()


@pytest.fixture
def config_overrides():
    return {}


@pytest.fixture
def app(razorpay_client, config_overrides):
    settings = {
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "RAZORPAY_KEY_ID": KEY_ID,
        "RAZORPAY_KEY_SECRET": KEY_SECRET,
        "RAZORPAY_WEBHOOK_SECRET": WEBHOOK_SECRET,
        "BLOCK_ACTIVE_MEMBER_ORDERS": True,
        "WEBHOOK_IDEMPOTENT": True,
        "CORE_MEMBER_EMAILS": [],
    }
    settings.update(config_overrides)
    app = create_app(settings)
    app.extensions["razorpay_client"] = razorpay_client

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def member(app):
    user = User(
        id="u1",
        email="asha@nmamit.in",
        name="Asha Rao",
        phone="9876543210",
        branch="CSE",
        year="3",
        usn="NNM22CS001",
    )
    db.session.add(user)
    db.session.commit()
    return user


def sign_webhook(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def sign_payment(order_id: str, payment_id: str, secret: str = KEY_SECRET) -> str:
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def captured_event(user_id="u1", plan_id="one-year", payment_id="pay_001", amount=35800,
                   order_id="order_test1", event="payment.captured"):
    notes = {}
    if user_id is not None:
        notes["userId"] = user_id
    if plan_id is not None:
        notes["planId"] = plan_id
    return {
        "entity": "event",
        "event": event,
        "payload": {
            "payment": {
                "entity": {
                    "id": payment_id,
                    "entity": "payment",
                    "order_id": order_id,
                    "amount": amount,
                    "currency": "INR",
                    "status": "captured",
                    "notes": notes,
                }
            }
        },
    }


@pytest.fixture
def post_webhook(client):
    def _post(event, signature=None, sign=True):
        body = json.dumps(event).encode("utf-8")
        headers = {"Content-Type": "application/json"}
        if signature is not None:
            headers["X-Razorpay-Signature"] = signature
        elif sign:
            headers["X-Razorpay-Signature"] = sign_webhook(body)
        return client.post("/webhook", data=body, headers=headers)
    return _post
