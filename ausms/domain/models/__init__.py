from .sms import DeliveryStatus, Message, MessageId, PhoneNumber, Token

__all__ = [
    "DeliveryStatus",
    "Message",
    "MessageId",
    "PhoneNumber",
    "Token",
]
