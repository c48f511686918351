"""Shared fixtures: in-memory SQLite app, test client, tenants, plans and a fake Razorpay."""

import datetime
import os
from decimal import Decimal

import pytest

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from linkhub import create_app  # noqa: E402
from linkhub import extensions  # noqa: E402
from linkhub.extensions import db  # noqa: E402
from linkhub.models.plan import Plan  # noqa: E402
from linkhub.models.promo_code import PromoCode  # noqa: E402
from linkhub.models.user import User  # noqa: E402
from linkhub.services import razorpay_client  # noqa: E402
from linkhub.utils.jwt_helper import encode_token  # noqa: E402

KEY_ID = "rzp_test_key"
KEY_SECRET = "rzp_test_secret"


class TestConfig:
    __test__ = False

    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BASE_URL = "https://linkhub.test"
    REDIS_URL = None
    REDIS_TTL = 60
    PLAN_LIMITS_CACHE_TTL = 30
    RAZORPAY_KEY_ID = KEY_ID
    RAZORPAY_KEY_SECRET = KEY_SECRET
    RAZORPAY_API_BASE = "https://api.razorpay.test/v1"
    RAZORPAY_TIMEOUT = 5
    PAYMENT_CURRENCY = "INR"
    ACTIVATION_MAX_ATTEMPTS = 3
    ENTITLEMENT_FAIL_CLOSED = False


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    extensions.redis_client = None


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tenant(app):
    user = User(username="chef", email="chef@example.com", display_name="Chef")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(tenant):
    return {"Authorization": f"Bearer {encode_token(tenant.id)}"}


@pytest.fixture
def make_plan(app):
    def _make(**overrides):
        data = {
            "name": "Pro",
            "monthly_price": Decimal("999"),
            "yearly_price": Decimal("9999"),
            "max_links": 5,
            "max_pages": 2,
            "max_blocks": 10,
            "max_socials": 3,
            "max_team_members": 2,
            "qr_code_enabled": True,
            "analytics_enabled": True,
        }
        data.update(overrides)
        plan = Plan(**data)
        db.session.add(plan)
        db.session.commit()
        return plan

    return _make


@pytest.fixture
def make_promo(app):
    def _make(code="SAVE20", discount_percent=Decimal("20"), **overrides):
        promo = PromoCode(code=code, discount_percent=discount_percent, **overrides)
        db.session.add(promo)
        db.session.commit()
        return promo

    return _make


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text or str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture
def gateway(monkeypatch):
    """Replaces requests.post inside the Razorpay client and records calls."""
    calls = []
    state = {"response": None, "counter": 0}

    def fake_post(url, json=None, auth=None, timeout=None):
        calls.append({"url": url, "json": json, "auth": auth, "timeout": timeout})
        if state["response"] is not None:
            return state["response"]
        state["counter"] += 1
        return FakeResponse(200, {
            "id": f"order_test{state['counter']}",
            "amount": json["amount"],
            "currency": json["currency"],
            "status": "created",
        })

    monkeypatch.setattr(razorpay_client.requests, "post", fake_post)

    class Gateway:
        def __init__(self):
            self.calls = calls

        def fail_with(self, response):
            state["response"] = response

    return Gateway()


def sign(order_id, payment_id, secret=KEY_SECRET):
    return razorpay_client.generate_signature(order_id, payment_id, secret)


def utcnow():
    return datetime.datetime.utcnow()
