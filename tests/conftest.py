import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import hashlib
import hmac
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

import boutique.models  # noqa: F401
from boutique.config import settings
from boutique.database import get_session
from boutique.main import app
from boutique.models.order import Order
from boutique.models.product import Product
from boutique.services.payment_gateway import PaymentGatewayError, get_payment_gateway, to_minor_units

KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"
ADMIN_EMAIL = "owner@boutique.test"
ADMIN_PASSWORD = "s3cret-pass"


def sign(secret: str, message) -> str:
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


class FakeGateway:
    """Stands in for Razorpay; records every create_order call."""

    def __init__(self):
        self.calls = []
        self.error: Optional[Exception] = None

    def create_order(self, amount, currency, receipt, notes=None):
        if self.error:
            raise self.error
        self.calls.append({"amount": amount, "currency": currency, "receipt": receipt, "notes": notes})
        return {
            "id": f"order_Test{len(self.calls):04d}",
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }

    def fail_with(self, message="Gateway unreachable"):
        self.error = PaymentGatewayError(message)


@pytest.fixture(autouse=True)
def app_settings(monkeypatch):
    monkeypatch.setattr(settings, "ENV", "test")
    monkeypatch.setattr(settings, "RAZORPAY_KEY_ID", "rzp_test_key")
    monkeypatch.setattr(settings, "RAZORPAY_KEY_SECRET", KEY_SECRET)
    monkeypatch.setattr(settings, "RAZORPAY_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr(settings, "ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "ADMIN_JWT_SECRET", "test_admin_jwt_secret")
    monkeypatch.setattr(settings, "SHIPPING_COST", 99)
    monkeypatch.setattr(settings, "ORDER_RATE_LIMIT", 1000)
    monkeypatch.setattr(settings, "TRUSTED_PROXY_HOPS", 0)
    yield settings


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="gateway")
def gateway_fixture():
    return FakeGateway()


@pytest.fixture(name="client")
def client_fixture(engine, gateway):
    def get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_payment_gateway] = lambda: gateway

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    response = client.post("/api/admin/login", json={"email": ADMIN_EMAIL.upper(), "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture(name="product")
def product_fixture(session):
    product = Product(name="Chanderi Kurta", price=4999, sizes=["S", "M", "L"], category="kurtas")
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def customer_payload(**overrides):
    customer = {
        "phone": "9876543210",
        "fullName": "Asha Rao",
        "email": "asha@example.com",
        "address": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "zipCode": "560001",
    }
    customer.update(overrides)
    return customer


def checkout_payload(product_id, quantity=1, size="M", **extra):
    payload = {
        "items": [{"id": product_id, "quantity": quantity, "size": size}],
        "customer": customer_payload(),
    }
    payload.update(extra)
    return payload


def fetch_order(engine, razorpay_order_id) -> Optional[Order]:
    with Session(engine) as session:
        order = session.exec(
            select(Order).where(Order.razorpay_order_id == razorpay_order_id)
        ).first()
        if order:
            session.expunge(order)
        return order


def make_order(engine, razorpay_order_id="order_Seed0001", status="pending", **fields) -> Order:
    values = dict(
        order_number=f"ORD-20261019-{razorpay_order_id[-6:].upper()}",
        status=status,
        subtotal=4999,
        shipping_cost=99,
        total=5098,
        razorpay_order_id=razorpay_order_id,
        delivery_name="Asha Rao",
        delivery_phone="9876543210",
        delivery_email="asha@example.com",
        delivery_address="12 MG Road",
        delivery_city="Bengaluru",
        delivery_zip="560001",
    )
    values.update(fields)
    with Session(engine) as session:
        order = Order(**values)
        session.add(order)
        session.commit()
        session.refresh(order)
        session.expunge(order)
        return order


def verify_body(razorpay_order_id, razorpay_payment_id="pay_Test0001", secret=KEY_SECRET):
    return {
        "razorpay_order_id": razorpay_order_id,
        "razorpay_payment_id": razorpay_payment_id,
        "razorpay_signature": sign(secret, f"{razorpay_order_id}|{razorpay_payment_id}"),
    }
