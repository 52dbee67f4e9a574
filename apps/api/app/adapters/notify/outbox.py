"""In-memory passcode outbox for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from app.adapters.notify.base import OtpDelivery, OtpPurpose
from app.core.logging_safety import mask_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class OutboxMessage:
    email: str
    otp: str
    purpose: OtpPurpose


class InMemoryOtpOutbox(OtpDelivery):
    """Keeps every passcode in memory instead of sending mail."""

    def __init__(self) -> None:
        self.messages: list[OutboxMessage] = []

    def send_otp(self, *, email: str, otp: str, purpose: OtpPurpose) -> None:
        self.messages.append(OutboxMessage(email=email, otp=otp, purpose=purpose))
        logger.info("otp.queued email=%s purpose=%s", mask_email(email), purpose)

    def latest_for(self, email: str) -> OutboxMessage | None:
        for message in reversed(self.messages):
            if message.email == email:
                return message
        return None


__all__ = ["InMemoryOtpOutbox", "OutboxMessage"]
