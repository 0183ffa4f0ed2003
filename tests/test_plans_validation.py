import dataclasses

import pytest

from utils.errors import InvalidPlan
from utils.plans import MEMBERSHIP_PLANS, get_plan, list_plans, require_plan
from utils.validation import sanitize_fields, sanitize_phone, validate_fields, validate_registrant


VALID_REGISTRANT = {
    "name": "Asha Rao",
    "email": "asha@nmamit.in",
    "phone": "9876543210",
    "branch": "CSE",
    "year": "3",
    "usn": "NNM22CS001",
}


class TestPlanCatalog:
    def test_catalog_prices(self):
        assert get_plan("one-year").price == 358
        assert get_plan("two-year").price == 664
        assert get_plan("three-year").price == 919

    def test_amount_is_price_in_paise(self):
        for plan in list_plans():
            assert plan.amount_minor == plan.price * 100

    def test_duration_years(self):
        assert [p.duration_years for p in list_plans()] == [1, 2, 3]

    def test_unknown_plan(self):
        assert get_plan("lifetime") is None
        assert get_plan(None) is None
        assert get_plan(["one-year"]) is None
        with pytest.raises(InvalidPlan):
            require_plan("lifetime")

    def test_plans_are_immutable(self):
        plan = MEMBERSHIP_PLANS["one-year"]
        with pytest.raises(dataclasses.FrozenInstanceError):
            plan.price = 1

    def test_plans_endpoint(self, client):
        resp = client.get("/plans")
        assert resp.status_code == 200
        ids = [p["id"] for p in resp.get_json()]
        assert ids == ["one-year", "two-year", "three-year"]


class TestRegistrantValidation:
    def test_valid_registrant(self):
        valid, errors = validate_registrant(VALID_REGISTRANT)
        assert valid
        assert errors == {}

    def test_phone_must_start_with_6_to_9(self):
        valid, errors = validate_registrant({**VALID_REGISTRANT, "phone": "1234567890"})
        assert not valid
        assert "phone" in errors

        valid, errors = validate_registrant({**VALID_REGISTRANT, "phone": "9876543210"})
        assert valid

    @pytest.mark.parametrize("phone", ["987654321", "98765432101", "98765abcde", "+919876543210"])
    def test_phone_must_be_ten_digits(self, phone):
        valid, errors = validate_registrant({**VALID_REGISTRANT, "phone": phone})
        assert not valid
        assert set(errors) == {"phone"}

    @pytest.mark.parametrize("email", ["asha", "asha@nmamit", "asha @nmamit.in", "@nmamit.in"])
    def test_bad_email(self, email):
        valid, errors = validate_registrant({**VALID_REGISTRANT, "email": email})
        assert not valid
        assert set(errors) == {"email"}

    def test_usn_prefix(self):
        assert validate_registrant({**VALID_REGISTRANT, "usn": "nu23is042"})[0]
        valid, errors = validate_registrant({**VALID_REGISTRANT, "usn": "4NM22CS001"})
        assert not valid
        assert "usn" in errors

    def test_required_fields_keyed_by_name(self):
        valid, errors = validate_registrant({"name": "  ", "email": "asha@nmamit.in"})
        assert not valid
        assert set(errors) == {"name", "phone", "branch", "year", "usn"}
        assert errors["name"] == "name is required"

    def test_partial_update_only_checks_present_fields(self):
        assert validate_fields({"branch": "ISE"}) == (True, {})
        valid, errors = validate_fields({"phone": "5555555555"})
        assert not valid
        assert set(errors) == {"phone"}

    def test_sanitize_escapes_and_truncates(self):
        cleaned = sanitize_fields({"name": " <b>Asha</b> ", "year": 3, "bio": "x" * 150})
        assert cleaned["name"] == "&lt;b&gt;Asha&lt;/b&gt;"
        assert cleaned["year"] == 3
        assert len(cleaned["bio"]) == 100

    @pytest.mark.parametrize("raw", [
        "+91 98765 43210",
        "09876543210",
        "98765-43210",
        "919876543210",
        "(98765) 43210",
    ])
    def test_sanitize_phone_normalizes_to_ten_digits(self, raw):
        assert sanitize_phone(raw) == "9876543210"

    def test_sanitize_phone_keeps_numbers_starting_with_91(self):
        assert sanitize_phone("9123456780") == "9123456780"

    def test_sanitize_phone_empty(self):
        assert sanitize_phone(None) == ""
        assert sanitize_phone("") == ""
