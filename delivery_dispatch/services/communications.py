"""
Mail and push transports.

The engine only depends on the abstract transports. Real delivery (SMTP,
SES, FCM, APNs, ...) lives outside this package; the logging transports
here record what would have been delivered and are used in development
and tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from delivery_dispatch.config import get_settings
from delivery_dispatch.models.message import Message
from delivery_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class MailDelivery:
    """Outcome of handing a mail to the transport."""

    to: str
    subject: str
    sender: str
    accepted: bool = True
    text: str | None = None
    html: str | None = None
    timestamp: datetime = field(default_factory=datetime.utcnow)


class MailTransport(ABC):
    """Sends email. Implementations raise on delivery errors."""

    @abstractmethod
    async def send_mail(
        self,
        to: str,
        subject: str,
        text: str | None = None,
        html: str | None = None,
    ) -> MailDelivery:
        """Send one email."""


class PushTransport(ABC):
    """Fans a persisted message out to the recipient's devices."""

    @abstractmethod
    async def push(self, message: Message) -> Any:
        """Deliver a message to every device token it carries."""


class LoggingMailTransport(MailTransport):
    """Mail transport that logs and remembers mail instead of sending it."""

    def __init__(self, sender: str | None = None):
        self.sender = sender or get_settings().mail_from
        self.sent: list[MailDelivery] = []

    async def send_mail(
        self,
        to: str,
        subject: str,
        text: str | None = None,
        html: str | None = None,
    ) -> MailDelivery:
        delivery = MailDelivery(
            to=to,
            subject=subject,
            sender=self.sender,
            text=text,
            html=html,
        )
        self.sent.append(delivery)
        logger.info("mail_sent", to=to, subject=subject, sender=self.sender)
        return delivery


class LoggingPushTransport(PushTransport):
    """Push transport that logs and remembers messages instead of pushing them."""

    def __init__(self) -> None:
        self.pushed: list[Message] = []

    async def push(self, message: Message) -> int:
        self.pushed.append(message)
        logger.info(
            "push_sent",
            message_id=str(message.id),
            message_type=message.message_type,
            devices=len(message.device_tokens),
        )
        return len(message.device_tokens)
