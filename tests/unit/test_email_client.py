import asyncio
import json

import httpx
import pytest

from storefront.errors import UpstreamError
from storefront.infra import email_client


def _patch_transport(monkeypatch, handler):
    real_client = httpx.AsyncClient

    def _client(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(email_client.httpx, "AsyncClient", _client)


def test_send_email_posts_to_resend(settings, monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "email_123"})

    _patch_transport(monkeypatch, handler)
    result = asyncio.run(email_client.send_email(
        settings,
        to="jane@example.com",
        subject="Thanks",
        html="<p>hi</p>",
        text="hi",
        bcc=["sales@clarity-clothing.com"],
        reply_to="sales@clarity-clothing.com",
    ))

    assert result == {"id": "email_123"}
    assert seen["url"] == "https://api.resend.com/emails"
    assert seen["auth"] == "Bearer re_test_123"
    assert seen["body"]["to"] == ["jane@example.com"]
    assert seen["body"]["bcc"] == ["sales@clarity-clothing.com"]
    assert seen["body"]["from"] == "Clarity <sales@clarity-clothing.com>"


def test_send_email_http_error(settings, monkeypatch):
    _patch_transport(monkeypatch, lambda request: httpx.Response(422, json={"message": "invalid to"}))
    with pytest.raises(UpstreamError) as exc:
        asyncio.run(email_client.send_email(settings, to="bad", subject="s", html="h", text="t"))
    assert "422" in exc.value.message


def test_send_email_network_error(settings, monkeypatch):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    _patch_transport(monkeypatch, handler)
    with pytest.raises(UpstreamError):
        asyncio.run(email_client.send_email(settings, to="a@x.com", subject="s", html="h", text="t"))


def test_send_email_without_api_key(settings):
    no_key = settings.model_copy(update={"resend_api_key": ""})
    with pytest.raises(UpstreamError):
        asyncio.run(email_client.send_email(no_key, to="a@x.com", subject="s", html="h", text="t"))
