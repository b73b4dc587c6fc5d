"""
Outgoing email.

``ResendMailer`` talks to the Resend HTTP API with httpx. When no API key is
configured ``LogMailer`` is used instead: it logs every message and keeps it in
``outbox`` so links can be picked up in development.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

import httpx

from . import config
from .errors import MailError
from .logging_config import get_logger

log = get_logger("mailer")


@dataclass
class EmailMessage:
    sender: str
    to: str
    subject: str
    html: str


class Mailer:
    def __init__(self, sender: Optional[str] = None):
        self.sender = sender or config.MAIL_FROM

    def send(self, to: str, subject: str, html: str) -> str:
        """Deliver one message; returns the provider's message id."""
        raise NotImplementedError


class LogMailer(Mailer):
    def __init__(self, sender: Optional[str] = None):
        super().__init__(sender)
        self.outbox: List[EmailMessage] = []

    def send(self, to: str, subject: str, html: str) -> str:
        msg = EmailMessage(sender=self.sender, to=to, subject=subject, html=html)
        self.outbox.append(msg)
        log.info("email (not delivered) to=%s subject=%r", to, subject)
        return f"local-{len(self.outbox)}"


class ResendMailer(Mailer):
    def __init__(
        self,
        api_key: str,
        sender: Optional[str] = None,
        api_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(sender)
        self.api_url = api_url or config.RESEND_API_URL
        self._client = httpx.Client(
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=config.MAIL_TIMEOUT_SECONDS,
            transport=transport,
        )

    def send(self, to: str, subject: str, html: str) -> str:
        body = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        try:
            r = self._client.post(self.api_url, json=body)
        except httpx.HTTPError as e:
            raise MailError(f"Email provider unreachable: {e}") from e
        if r.status_code >= 400:
            try:
                detail = r.json().get("message") or r.text
            except ValueError:
                detail = r.text
            raise MailError(f"Email provider rejected message ({r.status_code}): {detail}")
        try:
            return r.json().get("id", "")
        except (ValueError, AttributeError):
            # accepted, but no JSON body to read the id from
            return ""

    def close(self) -> None:
        self._client.close()


@lru_cache(maxsize=1)
def get_mailer() -> Mailer:
    if config.RESEND_API_KEY:
        log.info("using Resend for email delivery")
        return ResendMailer(config.RESEND_API_KEY)
    log.warning("RESEND_API_KEY not set; emails are logged, not delivered")
    return LogMailer()
