"""
SMS Central Client
SMS implementation using the SMS Central HTTP API v3.2.

Requests are form-encoded and authenticated with username/password.
Send responses are plain text, status responses are XML.
"""
import logging
import re
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from ausms.core.config import SMSCENTRAL_BASE_URL, SMSSettings
from ausms.domain.exceptions import SMSNotConfiguredError, SMSProtocolError, SMSProviderFailure
from ausms.domain.interfaces.sms_client import SMSClient
from ausms.domain.models.sms import DeliveryStatus, Message, MessageId, PhoneNumber

logger = logging.getLogger(__name__)

PROVIDER_NAME = "smscentral"

_ORIGINATOR_RE = re.compile(r"[A-Za-z0-9]{1,11}")
_ERROR_RE = re.compile(r"(\d{1,8})\s*(.*)")


@dataclass(frozen=True)
class SmsCentralConfig:
    """Account credentials and sender ID. Build with create()."""
    username: str
    password: str
    originator: str

    @classmethod
    def create(cls, username: str, password: str, originator: str) -> Optional["SmsCentralConfig"]:
        """
        Validate the originator and build a config.

        Returns:
            SmsCentralConfig, or None if the originator is not 1-11 alphanumerics
        """
        if not isinstance(originator, str) or not _ORIGINATOR_RE.fullmatch(originator):
            return None
        return cls(username=username, password=password, originator=originator)

    def __repr__(self) -> str:
        return f"SmsCentralConfig(username={self.username!r}, originator={self.originator!r})"


class SmsCentralClient(SMSClient):
    """
    SMS Central gateway client.

    Message ids are generated client-side and sent as the REFERENCE field,
    so the same id can be used to query status later.
    """

    def __init__(
        self,
        config: SmsCentralConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        base_url: str = SMSCENTRAL_BASE_URL,
        timeout: float = 30.0
    ):
        """
        Args:
            config: Validated account config
            http_client: Shared HTTP client (one is created and owned if omitted)
            base_url: API base URL
            timeout: Timeout for the owned HTTP client, ignored if http_client is given
        """
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._base_url = base_url.rstrip("/")

    @classmethod
    async def from_settings(
        cls,
        settings: SMSSettings,
        http_client: Optional[httpx.AsyncClient] = None
    ) -> "SmsCentralClient":
        """Build a client from SMSSettings."""
        if not settings.smscentral_username or not settings.smscentral_password:
            raise SMSNotConfiguredError(
                PROVIDER_NAME,
                "SMS Central not configured. Set AUSMS_SMSCENTRAL_USERNAME and AUSMS_SMSCENTRAL_PASSWORD."
            )
        config = SmsCentralConfig.create(
            settings.smscentral_username,
            settings.smscentral_password,
            settings.smscentral_originator or "",
        )
        if config is None:
            raise SMSNotConfiguredError(
                PROVIDER_NAME,
                "AUSMS_SMSCENTRAL_ORIGINATOR must be 1-11 letters or digits"
            )
        return cls(
            config,
            http_client,
            base_url=settings.smscentral_base_url,
            timeout=settings.http_timeout_seconds
        )

    @property
    def provider_name(self) -> str:
        return PROVIDER_NAME

    def _credentials(self) -> Dict[str, str]:
        return {
            "USERNAME": self._config.username,
            "PASSWORD": self._config.password,
        }

    async def send_message(self, to: PhoneNumber, message: Message) -> MessageId:
        """
        Send an SMS via SMS Central.

        A "0" body means accepted; "<code> <text>" is a gateway rejection.
        """
        message_id = MessageId(value=str(uuid.uuid4()))
        data = {
            **self._credentials(),
            "ACTION": "send",
            "ORIGINATOR": self._config.originator,
            "REFERENCE": message_id.value,
            "RECIPIENT": to.international("61"),
            "MESSAGE_TEXT": message.value,
        }

        response = await self._client.post(self._base_url, data=data)
        if response.status_code != 200:
            raise SMSProtocolError(
                PROVIDER_NAME,
                f"Unexpected response status {response.status_code}",
                status_code=response.status_code,
                body=response.text
            )

        body = response.text.strip()
        if body != "0":
            match = _ERROR_RE.fullmatch(body)
            if match:
                raise SMSProviderFailure(PROVIDER_NAME, int(match.group(1)), match.group(2))
            raise SMSProtocolError(PROVIDER_NAME, body, status_code=response.status_code, body=body)

        logger.debug(f"Message sent to {to} with id {message_id}")
        return message_id

    async def message_status(self, message_id: MessageId) -> DeliveryStatus:
        """Check delivery status of a message by its REFERENCE."""
        data = {
            **self._credentials(),
            "REFERENCE": message_id.value,
        }

        response = await self._client.post(f"{self._base_url}/checkstatus", data=data)
        if response.status_code != 200:
            raise SMSProtocolError(
                PROVIDER_NAME,
                "Failure parsing response as XML",
                status_code=response.status_code,
                body=response.text
            )
        try:
            root = ET.fromstring(response.text)
        except ET.ParseError as e:
            raise SMSProtocolError(
                PROVIDER_NAME,
                "Failure parsing response as XML",
                status_code=response.status_code,
                body=response.text
            ) from e

        status = DeliveryStatus.from_provider_code(root.findtext("message/status", default=""))
        if status is None:
            raise self._status_failure(root)

        logger.debug(f"Message status of {message_id} is {status.value}")
        return status

    @staticmethod
    def _status_failure(root: ET.Element) -> Exception:
        """Error for a status document without a recognised status."""
        document = ET.tostring(root, encoding="unicode")
        try:
            code = int(root.findtext("errorcode", default=""))
        except ValueError:
            return SMSProtocolError(PROVIDER_NAME, document, body=document)
        return SMSProviderFailure(PROVIDER_NAME, code, root.findtext("errormessage", default=""))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
