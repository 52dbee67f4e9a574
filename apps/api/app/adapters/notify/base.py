"""One-time passcode delivery interfaces."""

from abc import ABC, abstractmethod
from typing import Literal

OtpPurpose = Literal["verify_email", "reset_password"]


class OtpDeliveryError(Exception):
    """Raised when a passcode could not be handed to the delivery channel."""


class OtpDelivery(ABC):
    """Provider-neutral passcode delivery interface."""

    @abstractmethod
    def send_otp(self, *, email: str, otp: str, purpose: OtpPurpose) -> None:
        """Deliver ``otp`` to ``email``."""


__all__ = ["OtpDelivery", "OtpDeliveryError", "OtpPurpose"]
