"""
SMS Domain Models
Defines PhoneNumber, Message, MessageId, DeliveryStatus and Token value types
"""
import re
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


# Australian mobile in local (trunk-prefixed) format, e.g. 0412345678
_PHONE_RE = re.compile(r"04\d{8}")


class PhoneNumber(BaseModel):
    """Recipient mobile number in local Australian format."""
    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Local mobile number, 04 followed by 8 digits")

    @field_validator("value", mode="before")
    @classmethod
    def validate_value(cls, v: str) -> str:
        if not isinstance(v, str):
            raise ValueError("phone number must be a string")
        digits = v.replace(" ", "")
        if not _PHONE_RE.fullmatch(digits):
            raise ValueError("phone number must be in format 04XXXXXXXX")
        return digits

    @classmethod
    def parse(cls, text: str) -> Optional["PhoneNumber"]:
        """Build a PhoneNumber, returning None instead of raising on bad input."""
        try:
            return cls(value=text)
        except ValidationError:
            return None

    def international(self, country_code: str = "61") -> str:
        """Replace the leading trunk digit with the country code."""
        return country_code + self.value[1:]

    def __str__(self) -> str:
        return self.value


class Message(BaseModel):
    """SMS body. Length limits are left to the gateway."""
    model_config = ConfigDict(frozen=True)

    value: str

    def __str__(self) -> str:
        return self.value


class MessageId(BaseModel):
    """Opaque identifier correlating a sent message with status queries."""
    model_config = ConfigDict(frozen=True)

    value: str

    def __str__(self) -> str:
        return self.value


class DeliveryStatus(str, Enum):
    """Lifecycle of a message after submission"""
    PENDING = "pending"        # Accepted, not yet handed to the network
    SENT = "sent"              # Handed to the network
    DELIVERED = "delivered"    # Handset acknowledged delivery
    READ = "read"              # Recipient read the message

    @classmethod
    def from_provider_code(cls, code: str) -> Optional["DeliveryStatus"]:
        """Map a gateway status literal (PEND, SENT, DELIVRD, READ)."""
        return _PROVIDER_STATUS_CODES.get(code)


_PROVIDER_STATUS_CODES = {
    "PEND": DeliveryStatus.PENDING,
    "SENT": DeliveryStatus.SENT,
    "DELIVRD": DeliveryStatus.DELIVERED,
    "READ": DeliveryStatus.READ,
}


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Token(BaseModel):
    """
    Bearer token for the Telstra API.

    `expires` is always timezone-aware (UTC).
    """
    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Opaque bearer credential")
    expires: datetime = Field(..., description="Absolute expiry time")

    @field_validator("expires")
    @classmethod
    def ensure_aware(cls, v: datetime) -> datetime:
        return _as_utc(v)

    @classmethod
    def expired_placeholder(cls) -> "Token":
        """A token that is already expired, forcing a refresh on first use."""
        return cls(value="", expires=datetime.fromtimestamp(0, tz=timezone.utc))

    def remaining(self, now: datetime) -> timedelta:
        """Time left before expiry. A naive `now` is taken as UTC."""
        return self.expires - _as_utc(now)

    def needs_refresh(self, now: datetime, margin: timedelta) -> bool:
        return self.remaining(now) < margin
