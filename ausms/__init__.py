"""
ausms
Async SMS Central and Telstra SMS clients behind one interface.
"""
from ausms.core.config import SMSSettings, get_settings, load_settings
from ausms.domain.exceptions import (
    SMSClientError,
    SMSNotConfiguredError,
    SMSProtocolError,
    SMSProviderFailure,
)
from ausms.domain.interfaces.sms_client import SMSClient
from ausms.domain.models.sms import DeliveryStatus, Message, MessageId, PhoneNumber, Token
from ausms.infrastructure.sms import (
    SMSClientFactory,
    SmsCentralClient,
    SmsCentralConfig,
    TelstraSMSClient,
)

__version__ = "0.1.0"

__all__ = [
    "DeliveryStatus",
    "Message",
    "MessageId",
    "PhoneNumber",
    "SMSClient",
    "SMSClientError",
    "SMSClientFactory",
    "SMSNotConfiguredError",
    "SMSProtocolError",
    "SMSProviderFailure",
    "SMSSettings",
    "SmsCentralClient",
    "SmsCentralConfig",
    "TelstraSMSClient",
    "Token",
    "get_settings",
    "load_settings",
]
