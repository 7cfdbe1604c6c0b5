"""
SMS Client Interface
Abstract base class for SMS gateway providers
"""
from abc import ABC, abstractmethod

from ausms.domain.models.sms import DeliveryStatus, Message, MessageId, PhoneNumber


class SMSClient(ABC):
    """
    Abstract base class for SMS gateway clients.

    All clients must implement:
    - send_message(): Submit a single SMS for delivery
    - message_status(): Query the delivery state of a sent SMS
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (e.g., 'smscentral', 'telstra')."""
        pass

    @abstractmethod
    async def send_message(self, to: PhoneNumber, message: Message) -> MessageId:
        """
        Send an SMS message.

        Args:
            to: Recipient mobile number
            message: Message body

        Returns:
            MessageId to use with message_status()

        Raises:
            SMSClientError: If the gateway rejects the submission
        """
        pass

    @abstractmethod
    async def message_status(self, message_id: MessageId) -> DeliveryStatus:
        """
        Get the delivery status of a sent message.

        Args:
            message_id: Id returned by send_message() on this client

        Returns:
            Current DeliveryStatus

        Raises:
            SMSClientError: If the id is unknown or the response cannot be parsed
        """
        pass

    async def aclose(self) -> None:
        """Release resources"""
        pass

    async def __aenter__(self) -> "SMSClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
