"""
Les appels Stripe (SDK synchrone) ne doivent pas bloquer la boucle d'événements:
des requêtes simultanées se chevauchent au lieu de s'exécuter l'une après l'autre.
"""
import asyncio
import time

import httpx

STRIPE_LATENCY = 0.3


async def _concurrent(app, requests):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        started = time.perf_counter()
        responses = await asyncio.gather(*(ac.request(method, url, **kwargs) for method, url, kwargs in requests))
        return time.perf_counter() - started, responses


def test_concurrent_checkouts_overlap(app, monkeypatch):
    def slow_create_session(settings, **params):
        time.sleep(STRIPE_LATENCY)
        return {"id": "cs_test_slow", "url": "https://checkout.stripe.test/slow"}

    monkeypatch.setattr("storefront.infra.stripe_client.create_session", slow_create_session)
    body = {"items": [{"id": "1", "quantity": 1}]}
    elapsed, responses = asyncio.run(_concurrent(app, [("POST", "/create-checkout", {"json": body})] * 3))

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert elapsed < STRIPE_LATENCY * 2.5


def test_concurrent_webhooks_overlap(app, monkeypatch, sign, event_factory, session_factory, sent_emails):
    def slow_get_session(settings, session_id, expand=None):
        time.sleep(STRIPE_LATENCY)
        return session_factory(id=session_id)

    monkeypatch.setattr("storefront.infra.stripe_client.get_session", slow_get_session)
    payload = event_factory("checkout.session.completed", {"id": "cs_test_slow"})
    headers = {"stripe-signature": sign(payload)}
    elapsed, responses = asyncio.run(
        _concurrent(app, [("POST", "/stripe-webhook", {"content": payload, "headers": headers})] * 3)
    )

    assert [r.status_code for r in responses] == [200, 200, 200]
    assert len(sent_emails) == 3
    assert elapsed < STRIPE_LATENCY * 2.5
