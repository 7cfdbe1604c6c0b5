"""
Telstra SMS Client
SMS implementation using the Telstra SMS API v1.

OAuth 2.0 client-credentials flow:
- Bearer token fetched from /oauth/token
- Token kept in a TokenCache and refreshed when less than a minute remains
- Concurrent callers share a single refresh
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional, Tuple, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ausms.core.config import TELSTRA_BASE_URL, SMSSettings
from ausms.domain.exceptions import SMSNotConfiguredError, SMSProtocolError
from ausms.domain.interfaces.sms_client import SMSClient
from ausms.domain.models.sms import DeliveryStatus, Message, MessageId, PhoneNumber, Token
from ausms.infrastructure.sms.token_cache import TokenCache

logger = logging.getLogger(__name__)

PROVIDER_NAME = "telstra"
TOKEN_REFRESH_MARGIN = timedelta(minutes=1)

T = TypeVar("T")


class TokenResponse(BaseModel):
    """OAuth token response"""
    access_token: str
    expires_in: int = Field(..., ge=0, description="Seconds until expiry")

    def as_token(self, issued_at: datetime) -> Token:
        return Token(value=self.access_token, expires=issued_at + timedelta(seconds=self.expires_in))


class SendResponse(BaseModel):
    """Response to POST /sms/messages"""
    model_config = ConfigDict(populate_by_name=True)

    message_id: str = Field(..., alias="messageId")


class StatusResponse(BaseModel):
    """Response to GET /sms/messages/{id}"""
    status: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TelstraSMSClient(SMSClient):
    """
    Telstra SMS API client.

    Use create() to build an instance; the token cache starts with an already
    expired token so the first request triggers a refresh.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_cache: TokenCache,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = TELSTRA_BASE_URL,
        clock: Optional[Callable[[], datetime]] = None,
        timeout: float = 30.0
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_cache = token_cache
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")
        self._clock = clock or _utcnow

    @classmethod
    async def create(
        cls,
        client_id: str,
        client_secret: str,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = TELSTRA_BASE_URL,
        clock: Optional[Callable[[], datetime]] = None,
        timeout: float = 30.0
    ) -> "TelstraSMSClient":
        """
        Create a client with an empty (pre-expired) token.

        Args:
            client_id: Telstra API client ID
            client_secret: Telstra API client secret
            http_client: Shared HTTP client (one is created and owned if omitted)
            base_url: API base URL
            clock: Returns the current UTC time
            timeout: Timeout for the owned HTTP client, ignored if http_client is given
        """
        token_cache = TokenCache(Token.expired_placeholder())
        return cls(
            client_id,
            client_secret,
            token_cache,
            http_client=http_client,
            base_url=base_url,
            clock=clock,
            timeout=timeout
        )

    @classmethod
    async def from_settings(
        cls,
        settings: SMSSettings,
        http_client: Optional[httpx.AsyncClient] = None
    ) -> "TelstraSMSClient":
        """Build a client from SMSSettings."""
        if not settings.telstra_client_id or not settings.telstra_client_secret:
            raise SMSNotConfiguredError(
                PROVIDER_NAME,
                "Telstra SMS not configured. Set AUSMS_TELSTRA_CLIENT_ID and AUSMS_TELSTRA_CLIENT_SECRET."
            )
        return await cls.create(
            settings.telstra_client_id,
            settings.telstra_client_secret,
            http_client=http_client,
            base_url=settings.telstra_base_url,
            timeout=settings.http_timeout_seconds
        )

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    async def _freshen(self, body: Callable[[Token], Awaitable[T]]) -> T:
        """
        Run body with a token that is valid for at least TOKEN_REFRESH_MARGIN.

        The check and the refresh happen inside the token cache, so concurrent
        callers wait for one refresh instead of starting their own.
        """
        now = self._clock()

        async def refresh_if_needed(current: Token) -> Tuple[Token, Token]:
            if current.needs_refresh(now, TOKEN_REFRESH_MARGIN):
                current = await self._fetch_token()
            return current, current

        token = await self._token_cache.modify(refresh_if_needed)
        return await body(token)

    async def _fetch_token(self) -> Token:
        """Request a new token using client credentials."""
        params = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "grant_type": "client_credentials",
            "scope": "SMS",
        }
        try:
            issued_at = self._clock()
            response = await self._client.get(f"{self._base_url}/oauth/token", params=params)
            if response.status_code != 200:
                raise SMSProtocolError(
                    PROVIDER_NAME,
                    f"Unexpected response with code {response.status_code}",
                    status_code=response.status_code,
                    body=response.text
                )
            token_response = self._decode(response, TokenResponse)
            logger.debug(f"Token refreshed, expiring in {token_response.expires_in}s")
            return token_response.as_token(issued_at)
        except Exception:
            logger.error("Failed to refresh access token", exc_info=True)
            raise

    def _auth_headers(self, token: Token) -> dict:
        return {"Authorization": f"Bearer {token.value}"}

    @staticmethod
    def _decode(response: httpx.Response, model: type) -> BaseModel:
        """Parse a JSON body into model, raising SMSProtocolError on mismatch."""
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SMSProtocolError(
                PROVIDER_NAME,
                f"Could not decode JSON: {response.text}",
                status_code=response.status_code,
                body=response.text
            ) from e

    async def send_message(self, to: PhoneNumber, message: Message) -> MessageId:
        """
        Send an SMS via the Telstra API.

        Expects 202 Accepted with the assigned messageId.
        """
        async def run(token: Token) -> MessageId:
            response = await self._client.post(
                f"{self._base_url}/sms/messages",
                json={"to": to.value, "body": message.value},
                headers=self._auth_headers(token)
            )
            if response.status_code != 202:
                raise SMSProtocolError(
                    PROVIDER_NAME,
                    f"Unexpected response with code {response.status_code}",
                    status_code=response.status_code,
                    body=response.text
                )
            sent = self._decode(response, SendResponse)
            message_id = MessageId(value=sent.message_id)
            logger.debug(f"Message sent to {to} with id {message_id}")
            return message_id

        try:
            return await self._freshen(run)
        except Exception:
            logger.error("Failed to send SMS", exc_info=True)
            raise

    async def message_status(self, message_id: MessageId) -> DeliveryStatus:
        """Get delivery status of a message."""
        url = f"{self._base_url}/sms/messages/{quote(message_id.value, safe='')}"

        async def run(token: Token) -> DeliveryStatus:
            response = await self._client.get(url, headers=self._auth_headers(token))
            if response.status_code != 200:
                raise SMSProtocolError(
                    PROVIDER_NAME,
                    f"Unexpected response with code {response.status_code}",
                    status_code=response.status_code,
                    body=response.text
                )
            body = self._decode(response, StatusResponse)
            status = DeliveryStatus.from_provider_code(body.status)
            if status is None:
                raise SMSProtocolError(
                    PROVIDER_NAME,
                    f"Unknown message status: {body.status}",
                    status_code=response.status_code,
                    body=response.text
                )
            logger.debug(f"Message status of {message_id} is {status.value}")
            return status

        try:
            return await self._freshen(run)
        except Exception:
            logger.error("Failed to check status of SMS", exc_info=True)
            raise

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
