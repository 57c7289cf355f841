from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from chatterbox.errors import EmailNotConfigured, EmailSendError

LOGGER = logging.getLogger(__name__)

RESEND_SEND_ENDPOINT = "https://api.resend.com/emails"


@dataclass(frozen=True)
class EmailReceipt:
    message_id: Optional[str]


class EmailService:
    def __init__(
        self,
        api_key: str,
        sender: str,
        subject: str = "Your Chatterbox login code",
        code_ttl_minutes: int = 10,
        timeout: float = 10,
    ) -> None:
        self._api_key = api_key
        self._sender = sender
        self._subject = subject
        self._code_ttl_minutes = code_ttl_minutes
        self._timeout = timeout

    def is_configured(self) -> bool:
        return bool(self._api_key and self._sender)

    def send_login_code(self, to_email: str, code: str) -> EmailReceipt:
        if not self.is_configured():
            raise EmailNotConfigured()

        payload = json.dumps(
            {
                "from": self._sender,
                "to": [to_email],
                "subject": self._subject,
                "html": _build_html(code, self._code_ttl_minutes),
                "text": _build_text(code, self._code_ttl_minutes),
            }
        ).encode("utf-8")
        request = Request(
            RESEND_SEND_ENDPOINT,
            data=payload,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            method="POST",
        )

        try:
            with urlopen(request, timeout=self._timeout) as response:
                body = response.read().decode("utf-8")
        except HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            LOGGER.error("Resend API error %s: %s", exc.code, error_body)
            raise EmailSendError() from exc
        except URLError as exc:
            LOGGER.error("Failed to reach Resend API: %s", exc.reason)
            raise EmailSendError() from exc

        try:
            data = json.loads(body) if body else {}
        except ValueError:
            LOGGER.warning("Resend API returned a non-JSON body")
            data = {}
        return EmailReceipt(message_id=data.get("id"))


def _build_text(code: str, ttl_minutes: int) -> str:
    return (
        f"Your Chatterbox login code is: {code}\n\n"
        "Enter this code in your Chatterbox app to complete your login.\n\n"
        f"This code will expire in {ttl_minutes} minutes for your security.\n\n"
        "If you didn't request this code, you can safely ignore this email."
    )


def _build_html(code: str, ttl_minutes: int) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; '
        'margin: 0 auto; padding: 20px;">'
        '<h2 style="color: #333; text-align: center;">Chatterbox Login</h2>'
        '<h1 style="font-size: 36px; text-align: center; color: #007AFF; '
        f'letter-spacing: 8px; font-family: monospace;">{code}</h1>'
        '<p style="color: #666; text-align: center;">'
        "Enter this code in your Chatterbox app to complete your login.</p>"
        '<p style="color: #999; text-align: center; font-size: 14px;">'
        f"This code will expire in {ttl_minutes} minutes for your security.</p>"
        '<p style="color: #999; text-align: center; font-size: 12px;">'
        "If you didn't request this code, you can safely ignore this email.</p>"
        "</div>"
    )
