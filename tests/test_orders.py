from datetime import datetime, timedelta

import pytest
from razorpay.errors import BadRequestError

from conftest import KEY_ID
from models import db
from models.audit_log import AuditLog
from models.user import User
from utils.plans import list_plans


def _create_order(client, **body):
    return client.post("/create-order", json=body)


class TestCreateOrder:
    @pytest.mark.parametrize("plan", list_plans(), ids=lambda p: p.id)
    def test_amount_comes_from_catalog(self, client, razorpay_client, plan):
        resp = _create_order(client, planId=plan.id, userId="u1")
        assert resp.status_code == 200

        data = resp.get_json()
        assert data["amount"] == plan.price * 100
        assert data["currency"] == "INR"
        assert data["keyId"] == KEY_ID
        assert data["orderId"] == "order_test1"

        sent = razorpay_client.order.calls[0]
        assert sent["amount"] == plan.price * 100
        assert sent["notes"] == {"userId": "u1", "planId": plan.id, "planName": plan.name}
        assert sent["receipt"].startswith("order_")

    def test_client_supplied_amount_is_ignored(self, client, razorpay_client):
        resp = _create_order(client, planId="one-year", userId="u1", amount=1, price=1)
        assert resp.status_code == 200
        assert razorpay_client.order.calls[0]["amount"] == 35800

    @pytest.mark.parametrize("plan_id", ["gold", "", None, 358])
    def test_invalid_plan(self, client, razorpay_client, plan_id):
        resp = _create_order(client, planId=plan_id, userId="u1")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Invalid plan selected"}
        assert razorpay_client.order.calls == []

    def test_user_id_required(self, client, razorpay_client):
        resp = _create_order(client, planId="one-year")
        assert resp.status_code == 400
        assert razorpay_client.order.calls == []

    def test_gateway_failure(self, client, razorpay_client):
        razorpay_client.order.error = BadRequestError("Authentication failed")
        resp = _create_order(client, planId="one-year", userId="u1")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Failed to create order"}
        assert AuditLog.query.filter_by(action="ORDER_CREATE_FAILED").count() == 1

    def test_gateway_not_configured(self, app, client):
        app.extensions["razorpay_client"] = None
        resp = _create_order(client, planId="one-year", userId="u1")
        assert resp.status_code == 500


class TestActiveMemberGuard:
    def _activate(self, member, expires_at):
        member.membership_status = "active"
        member.membership_type = "one-year"
        member.membership_expires_at = expires_at
        db.session.commit()

    def test_rejects_active_unexpired_member(self, client, razorpay_client, member):
        self._activate(member, datetime.utcnow() + timedelta(days=30))
        for plan in list_plans():
            resp = _create_order(client, planId=plan.id, userId="u1")
            assert resp.status_code == 400
            assert resp.get_json() == {"error": "User already has an active subscription"}
        assert razorpay_client.order.calls == []
        assert AuditLog.query.filter_by(action="ORDER_REJECTED_ACTIVE").count() == 3

    def test_expired_member_can_renew(self, client, razorpay_client, member):
        self._activate(member, datetime.utcnow() - timedelta(days=1))
        resp = _create_order(client, planId="two-year", userId="u1")
        assert resp.status_code == 200
        assert len(razorpay_client.order.calls) == 1

    def test_unknown_user_can_order(self, client):
        resp = _create_order(client, planId="one-year", userId="someone-new")
        assert resp.status_code == 200

    @pytest.mark.parametrize("config_overrides", [{"BLOCK_ACTIVE_MEMBER_ORDERS": False}])
    def test_guard_disabled_mints_new_order(self, client, razorpay_client, member):
        self._activate(member, datetime.utcnow() + timedelta(days=30))
        resp = _create_order(client, planId="three-year", userId="u1")
        assert resp.status_code == 200
        assert razorpay_client.order.calls[0]["amount"] == 91900
        assert db.session.get(User, "u1").membership_type == "one-year"
