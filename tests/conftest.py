import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient

# Pas de Redis en tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from storefront.app_setup.factory import create_app
from storefront.config import Settings, ShippingRates

WEBHOOK_SECRET = "whsec_test_secret"


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        stripe_secret_key="sk_test_123",
        stripe_webhook_secret=WEBHOOK_SECRET,
        resend_api_key="re_test_123",
        site_url="https://clarity-shop.netlify.app",
        free_shipping_threshold=7500,
        shipping_rates=ShippingRates(
            standard="shr_standard",
            express="shr_express",
            free="shr_free",
            regional="shr_regional",
            international="shr_international",
        ),
        cors_origins=("http://localhost:63342", "https://clarity-shop.netlify.app"),
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
    """En-tête stripe-signature valide (même schéma que Stripe: HMAC-SHA256 de 't.payload')."""
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed = f"{timestamp}.".encode("utf-8") + payload
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def make_event(event_type: str, session: Dict[str, Any]) -> bytes:
    return json.dumps({
        "id": "evt_test_1",
        "object": "event",
        "type": event_type,
        "data": {"object": session},
    }).encode("utf-8")


def make_session(**overrides: Any) -> Dict[str, Any]:
    """Session Checkout 'complète' telle que renvoyée par retrieve(expand=...)."""
    session: Dict[str, Any] = {
        "id": "cs_test_a1B2c3D4e5F6g7H8",
        "object": "checkout.session",
        "status": "complete",
        "payment_status": "paid",
        "client_reference_id": "CLR-20261019-ABC123",
        "metadata": {"order_number": "CLR-20261019-ABC123", "cart": "[]"},
        "currency": "gbp",
        "amount_subtotal": 9998,
        "amount_total": 10497,
        "total_details": {"amount_tax": 0, "amount_discount": 0, "amount_shipping": 499},
        "customer_details": {"email": "jane@example.com", "name": "Jane Doe"},
        "shipping_cost": {
            "amount_total": 499,
            "shipping_rate": {"id": "shr_standard", "display_name": "Standard delivery"},
        },
        "shipping_details": {
            "name": "Jane Doe",
            "address": {
                "line1": "1 High Street",
                "line2": None,
                "city": "London",
                "state": None,
                "postal_code": "N1 1AA",
                "country": "GB",
            },
        },
        "line_items": {
            "object": "list",
            "data": [
                {
                    "id": "li_1",
                    "description": "Classic Black Hoodie",
                    "quantity": 2,
                    "amount_total": 9998,
                    "currency": "gbp",
                    "price": {
                        "unit_amount": 4999,
                        "currency": "gbp",
                        "product": {"name": "Classic Black Hoodie", "images": ["https://clarity-shop.netlify.app/images/hoodie.jpg"]},
                    },
                }
            ],
        },
    }
    session.update(overrides)
    return session


@pytest.fixture
def sent_emails(monkeypatch) -> List[Dict[str, Any]]:
    """Remplace l'appel HTTP Resend; collecte les emails 'envoyés'."""
    sent: List[Dict[str, Any]] = []

    async def _fake_send_email(settings, **kwargs):
        sent.append(kwargs)
        return {"id": f"email_{len(sent)}"}

    monkeypatch.setattr("storefront.infra.email_client.send_email", _fake_send_email)
    return sent


@pytest.fixture
def sign():
    return sign_payload


@pytest.fixture
def event_factory():
    return make_event


@pytest.fixture
def session_factory():
    return make_session
