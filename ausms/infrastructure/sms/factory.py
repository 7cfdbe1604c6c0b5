"""
SMS Client Factory
"""
import logging
from typing import Dict, List, Optional, Type

import httpx

from ausms.core.config import SMSSettings
from ausms.domain.interfaces.sms_client import SMSClient

logger = logging.getLogger(__name__)


class SMSClientFactory:
    """
    Factory for creating SMS client instances.

    Registered classes must provide an async from_settings(settings, http_client).
    """

    _providers: Dict[str, Type[SMSClient]] = {}

    @classmethod
    def register(cls, name: str, client_class: Type[SMSClient]) -> None:
        """Register a client class under a provider name"""
        cls._providers[name] = client_class
        logger.info(f"Registered SMS provider: {name}")

    @classmethod
    async def create(
        cls,
        provider_name: str,
        settings: SMSSettings,
        http_client: Optional[httpx.AsyncClient] = None
    ) -> SMSClient:
        """
        Create an SMS client.

        Args:
            provider_name: Registered provider name (e.g., 'telstra')
            settings: Credentials and endpoints
            http_client: Shared HTTP client (the client creates its own if omitted)

        Raises:
            ValueError: If provider is not registered
            SMSNotConfiguredError: If settings lack what the provider needs
        """
        if provider_name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "None"
            raise ValueError(f"Unknown SMS provider: {provider_name}. Available: {available}")

        client_class = cls._providers[provider_name]
        return await client_class.from_settings(settings, http_client)

    @classmethod
    async def from_settings(
        cls,
        settings: SMSSettings,
        http_client: Optional[httpx.AsyncClient] = None
    ) -> SMSClient:
        """Create the client selected by settings.provider"""
        return await cls.create(settings.provider, settings, http_client)

    @classmethod
    def list_providers(cls) -> List[str]:
        """List available providers"""
        return list(cls._providers.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if a provider is registered."""
        return name in cls._providers
