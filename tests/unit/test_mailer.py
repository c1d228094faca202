import pytest
import requests

from wavy.config import settings
from wavy.errors import EmailDeliveryError
from wavy.services import mailer


class FakeResponse:
    def __init__(self, status_code: int, text: str = ""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setattr(settings, "RESEND_API_KEY", "re_test")


def test_send_is_skipped_without_api_key(monkeypatch) -> None:
    def explode(*args, **kwargs):
        raise AssertionError("provider must not be called")

    monkeypatch.setattr(settings, "RESEND_API_KEY", "")
    monkeypatch.setattr(requests, "post", explode)
    assert mailer.send_email("a@wavy.test", "Sujet", "<p>x</p>") is False


def test_send_posts_to_resend(monkeypatch, api_key) -> None:
    calls = []

    def fake_post(url, json, headers, timeout):
        calls.append({"url": url, "json": json, "headers": headers})
        return FakeResponse(200)

    monkeypatch.setattr(requests, "post", fake_post)
    attachments = [{"filename": "cra.pdf", "content": "JVBERi0="}]

    assert mailer.send_email("a@wavy.test", "Sujet", "<p>x</p>", attachments) is True
    (call,) = calls
    assert call["url"] == settings.RESEND_API_URL
    assert call["headers"]["Authorization"] == "Bearer re_test"
    assert call["json"]["to"] == ["a@wavy.test"]
    assert call["json"]["attachments"] == attachments


def test_provider_error_raises(monkeypatch, api_key) -> None:
    monkeypatch.setattr(requests, "post", lambda *a, **kw: FakeResponse(422, "invalid from"))
    with pytest.raises(EmailDeliveryError):
        mailer.send_email("a@wavy.test", "Sujet", "<p>x</p>")


def test_safe_send_swallows_failures(monkeypatch, api_key) -> None:
    def broken_post(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(requests, "post", broken_post)
    assert mailer.send_email_safely("a@wavy.test", "Sujet", "<p>x</p>") is False
