import pytest


@pytest.fixture
def stripe_sessions(monkeypatch, session_factory):
    """stripe_client.get_session mocké: sessions indexées par id."""
    store = {}

    def fake_get_session(settings, session_id, expand=None):
        if session_id not in store:
            raise RuntimeError(f"No such checkout.session: {session_id}")
        return store[session_id]

    monkeypatch.setattr("storefront.infra.stripe_client.get_session", fake_get_session)
    return store


def test_retrieve_session_payload(client, stripe_sessions, session_factory):
    session = session_factory()
    stripe_sessions[session["id"]] = session

    res = client.get("/retrieve-session", params={"session_id": session["id"]})
    assert res.status_code == 200
    data = res.json()
    assert data["orderRef"] == "CLR-20261019-ABC123"
    assert data["sessionId"] == session["id"]
    assert data["currency"] == "GBP"
    assert data["subtotal"] == 9998
    assert data["shipping"] == {"label": "Standard delivery", "amount": 499}
    assert data["tax"] == 0
    assert data["discount"] == 0
    assert data["total"] == 10497
    assert data["items"][0]["description"] == "Classic Black Hoodie"
    assert data["items"][0]["unitAmount"] == 4999
    assert data["items"][0]["quantity"] == 2


def test_retrieve_session_order_ref_from_metadata(client, stripe_sessions, session_factory):
    session = session_factory(client_reference_id=None)
    stripe_sessions[session["id"]] = session
    data = client.get("/retrieve-session", params={"session_id": session["id"]}).json()
    assert data["orderRef"] == "CLR-20261019-ABC123"


def test_retrieve_session_synthesized_order_ref(client, stripe_sessions):
    stripe_sessions["cs_test_zzzzabcd1234"] = {"id": "cs_test_zzzzabcd1234"}
    data = client.get("/retrieve-session", params={"session_id": "cs_test_zzzzabcd1234"}).json()
    assert data["orderRef"] == "CLR-ABCD1234"
    assert data["items"] == []
    assert data["total"] == 0


@pytest.mark.parametrize("query", ["", "?session_id=", "?session_id=%20"])
def test_retrieve_session_missing_id(client, stripe_sessions, query):
    res = client.get("/retrieve-session" + query)
    assert res.status_code == 400
    assert res.json() == {"error": "Missing session_id"}


def test_retrieve_session_stripe_failure(client, stripe_sessions):
    res = client.get("/retrieve-session", params={"session_id": "cs_test_unknown"})
    assert res.status_code == 500
    assert res.json() == {"error": "Failed to retrieve session"}


def test_retrieve_session_post_not_allowed(client):
    assert client.post("/retrieve-session").status_code == 405
