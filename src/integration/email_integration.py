import asyncio
import logging
import os
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

import requests

from assistant_ai.models import EmailAnalytics, SendResult
from assistant_ai.timeutil import local_now
from integration.collaborators import EmailSender

logger = logging.getLogger(__name__)

# Rates used to estimate delivery stats from the local send log.
DELIVERY_RATE = 0.95
OPEN_RATE = 0.25
CLICK_RATE = 0.05

_TAG = re.compile(r"<[^>]*>")


def strip_html(html: str) -> str:
    return _TAG.sub("", html).strip()


@dataclass
class SentEmail:
    to: str
    subject: str
    html_body: str
    sent_at: datetime
    message_id: str


@dataclass
class SendGridConfig:
    api_key: str
    from_email: str
    from_name: str = "Executive Assistant"
    base_url: str = "https://api.sendgrid.com/v3"

    @classmethod
    def from_env(cls) -> Optional["SendGridConfig"]:
        api_key = os.getenv("SENDGRID_API_KEY", "").strip()
        from_email = os.getenv("SENDGRID_FROM_EMAIL", "").strip()
        if not api_key or not from_email:
            return None
        return cls(
            api_key=api_key,
            from_email=from_email,
            from_name=os.getenv("SENDGRID_FROM_NAME", "Executive Assistant"),
        )


class LoggedEmailSender(EmailSender):
    """Keeps a record of every successful send and derives analytics from it."""

    def __init__(self, clock: Callable[[], datetime] = local_now):
        self.clock = clock
        self.sent: List[SentEmail] = []

    def _record(self, to: str, subject: str, html_body: str, message_id: str) -> None:
        self.sent.append(
            SentEmail(to=to, subject=subject, html_body=html_body, sent_at=self.clock(), message_id=message_id)
        )

    async def get_analytics(self, start: datetime, end: datetime) -> EmailAnalytics:
        sent = sum(1 for e in self.sent if start <= e.sent_at <= end)
        delivered = int(sent * DELIVERY_RATE)
        return EmailAnalytics(
            sent=sent,
            delivered=delivered,
            opened=int(sent * OPEN_RATE),
            clicked=int(sent * CLICK_RATE),
            bounced=sent - delivered,
            period_start=start,
            period_end=end,
        )


class InMemoryEmailSender(LoggedEmailSender):
    """Simulated delivery: nothing leaves the process."""

    async def send(self, to: str, subject: str, html_body: str) -> SendResult:
        message_id = f"mock-{uuid.uuid4().hex[:12]}"
        self._record(to, subject, html_body, message_id)
        logger.info(f"Mock email sent to {to}: {subject}")
        return SendResult(success=True, id=message_id)


class SendGridEmailSender(LoggedEmailSender):
    def __init__(self, config: SendGridConfig, timeout_s: float = 10.0, clock: Callable[[], datetime] = local_now):
        super().__init__(clock=clock)
        self.config = config
        self.timeout_s = timeout_s

    def _post(self, to: str, subject: str, html_body: str) -> str:
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.config.from_email, "name": self.config.from_name},
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": strip_html(html_body)},
                {"type": "text/html", "value": html_body},
            ],
        }
        response = requests.post(
            f"{self.config.base_url}/mail/send",
            headers={"Authorization": f"Bearer {self.config.api_key}"},
            json=payload,
            timeout=self.timeout_s,
        )
        response.raise_for_status()
        return response.headers.get("X-Message-Id") or uuid.uuid4().hex

    async def send(self, to: str, subject: str, html_body: str) -> SendResult:
        try:
            message_id = await asyncio.to_thread(self._post, to, subject, html_body)
        except Exception as e:
            logger.error(f"Error sending email to {to}: {e}")
            return SendResult(success=False, error=str(e))

        self._record(to, subject, html_body, message_id)
        logger.info(f"Email sent successfully to {to}")
        return SendResult(success=True, id=message_id)


def email_sender_from_env() -> EmailSender:
    config = SendGridConfig.from_env()
    if config is None:
        logger.warning("SendGrid API key not configured. Email features will be simulated.")
        return InMemoryEmailSender()
    return SendGridEmailSender(config)
