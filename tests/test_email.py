import io
import json
from urllib.error import HTTPError, URLError

import pytest

from chatterbox.errors import EmailNotConfigured, EmailSendError
from chatterbox.services import email as email_module
from chatterbox.services.email import RESEND_SEND_ENDPOINT, EmailService


class FakeResponse:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


@pytest.fixture
def service():
    return EmailService("re_test_key", "clue@glovee.io")


class TestEmailService:
    def test_is_configured(self, service):
        assert service.is_configured() is True
        assert EmailService("", "clue@glovee.io").is_configured() is False

    def test_sends_login_code(self, service, monkeypatch):
        captured = {}

        def fake_urlopen(request, timeout):
            captured["request"] = request
            captured["timeout"] = timeout
            return FakeResponse(b'{"id": "msg_123"}')

        monkeypatch.setattr(email_module, "urlopen", fake_urlopen)
        receipt = service.send_login_code("a@x.com", "012345")

        assert receipt.message_id == "msg_123"
        request = captured["request"]
        assert request.full_url == RESEND_SEND_ENDPOINT
        assert request.get_method() == "POST"
        assert request.get_header("Authorization") == "Bearer re_test_key"
        payload = json.loads(request.data.decode("utf-8"))
        assert payload["to"] == ["a@x.com"]
        assert payload["from"] == "clue@glovee.io"
        assert payload["subject"] == "Your Chatterbox login code"
        assert "012345" in payload["text"]
        assert "012345" in payload["html"]
        assert "10 minutes" in payload["text"]

    def test_http_error_becomes_send_error(self, service, monkeypatch):
        def fake_urlopen(request, timeout):
            raise HTTPError(
                RESEND_SEND_ENDPOINT, 422, "Unprocessable", {}, io.BytesIO(b'{"message": "bad"}')
            )

        monkeypatch.setattr(email_module, "urlopen", fake_urlopen)
        with pytest.raises(EmailSendError):
            service.send_login_code("a@x.com", "123456")

    def test_network_error_becomes_send_error(self, service, monkeypatch):
        def fake_urlopen(request, timeout):
            raise URLError("connection refused")

        monkeypatch.setattr(email_module, "urlopen", fake_urlopen)
        with pytest.raises(EmailSendError):
            service.send_login_code("a@x.com", "123456")

    def test_unconfigured_service_refuses(self):
        with pytest.raises(EmailNotConfigured):
            EmailService("", "").send_login_code("a@x.com", "123456")
