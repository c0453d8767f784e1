"""
Shared fixtures: in-memory SQLite database, API client, users and tokens.
"""
import hashlib
import hmac
import json
import os
import tempfile
import time
from decimal import Decimal

# Configuration is read at import time, so it has to be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="cozy-corner-uploads-")
for key in ("SMTP_HOST", "SMTP_USER", "TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"):
    os.environ[key] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from cozy_corner.auth_utils import create_access_token, get_password_hash  # noqa: E402
from cozy_corner.db import Base, SessionLocal, engine  # noqa: E402
from cozy_corner.main import app  # noqa: E402
from cozy_corner.models.menu_item import MenuCategory, MenuItem  # noqa: E402
from cozy_corner.models.order import (Order, OrderItem, OrderStatus, OrderType,  # noqa: E402
                                      PaymentStatus)
from cozy_corner.models.user import User, UserRole, UserStatus  # noqa: E402

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    # Not used as a context manager so the startup migrations do not run
    return TestClient(app)


def make_user(db, email, role=UserRole.customer, password="secret123", name="Test User"):
    user = User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        status=UserStatus.active,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def headers_for(user):
    token = create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(db):
    return make_user(db, "jane@example.com", name="Jane Doe")


@pytest.fixture
def other_customer(db):
    return make_user(db, "john@example.com", name="John Roe")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=UserRole.admin, name="Admin")


@pytest.fixture
def customer_headers(customer):
    return headers_for(customer)


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


def make_menu_item(db, name="Latte", price="10.00", category=MenuCategory.Beverages, **extra):
    item = MenuItem(
        name=name,
        description=f"{name} from the kitchen",
        price=Decimal(price),
        category=category,
        **extra,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def make_order(db, user, status=OrderStatus.pending, payment_status=PaymentStatus.pending,
               payment_id=None, total="25.00", order_type=OrderType.pickup):
    order = Order(
        user_id=user.id,
        total_amount=Decimal(total),
        status=status,
        payment_status=payment_status,
        payment_id=payment_id,
        order_type=order_type,
        items=[OrderItem(name="Latte", quantity=1, price=Decimal(total))],
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def signed_webhook(event_type, payment_intent_id, secret=WEBHOOK_SECRET):
    """Body and headers for a webhook signed the way Stripe signs them."""
    payload = json.dumps({
        "id": f"evt_{payment_intent_id}",
        "object": "event",
        "type": event_type,
        "data": {"object": {"id": payment_intent_id, "object": "payment_intent"}},
    })
    timestamp = int(time.time())
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return payload, {
        "Stripe-Signature": f"t={timestamp},v1={signature}",
        "Content-Type": "application/json",
    }
