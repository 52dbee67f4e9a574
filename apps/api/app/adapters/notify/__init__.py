"""Passcode delivery adapters."""

from .base import OtpDelivery, OtpDeliveryError, OtpPurpose
from .outbox import InMemoryOtpOutbox, OutboxMessage

__all__ = [
    "InMemoryOtpOutbox",
    "OtpDelivery",
    "OtpDeliveryError",
    "OtpPurpose",
    "OutboxMessage",
]
