"""
SMS Gateway Clients
SMS Central and Telstra implementations of SMSClient.
"""
from .factory import SMSClientFactory
from .smscentral import SmsCentralClient, SmsCentralConfig
from .telstra import TOKEN_REFRESH_MARGIN, TelstraSMSClient
from .token_cache import TokenCache

SMSClientFactory.register("smscentral", SmsCentralClient)
SMSClientFactory.register("telstra", TelstraSMSClient)

__all__ = [
    "SMSClientFactory",
    "SmsCentralClient",
    "SmsCentralConfig",
    "TOKEN_REFRESH_MARGIN",
    "TelstraSMSClient",
    "TokenCache",
]
