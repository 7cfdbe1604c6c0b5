"""
SMS Client Exceptions
Errors raised by the gateway adapters. The gateway is carried as a field.
"""
from typing import Optional


class SMSClientError(Exception):
    """Base exception for SMS gateway errors."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(provider, message)

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(provider={self.provider!r}, message={self.message!r})"


class SMSProviderFailure(SMSClientError):
    """The gateway rejected the request with a numeric code and message."""

    def __init__(self, provider: str, code: int, message: str):
        self.provider = provider
        self.code = code
        self.message = message
        Exception.__init__(self, provider, code, message)

    def __str__(self) -> str:
        return f"[{self.provider}] {self.code}: {self.message}"


class SMSProtocolError(SMSClientError):
    """Unexpected status code, body or response shape."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None
    ):
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.body = body
        Exception.__init__(self, provider, message, status_code, body)


class SMSNotConfiguredError(SMSClientError):
    """Raised when a provider cannot be built from the given settings."""
    pass
