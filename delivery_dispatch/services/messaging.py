"""Message Dispatcher - gated push messages and email."""

from enum import Enum
from typing import Any

from delivery_dispatch.models.base import Party, Recipient
from delivery_dispatch.models.message import Message
from delivery_dispatch.models.results import ErrorResult
from delivery_dispatch.services.base import BaseService, guarded
from delivery_dispatch.services.communications import (
    MailDelivery,
    MailTransport,
    PushTransport,
)
from delivery_dispatch.services.gate import allows_email, allows_notification, category_key
from delivery_dispatch.state.repository import Repository


class MessageDispatcher(BaseService):
    """
    Builds and records notifications for any kind of recipient.

    Responsibilities:
    - Check the recipient's opt-ins before anything is sent
    - Persist one Message per allowed push notification
    - Hand allowed email to the mail transport
    - Return refusals and failures as values, never raise
    """

    def __init__(
        self,
        repository: Repository,
        mail_transport: MailTransport,
        push_transport: PushTransport | None = None,
    ):
        super().__init__("message_dispatcher", repository)
        self.mail_transport = mail_transport
        self.push_transport = push_transport

    @guarded("send_message")
    async def send_message(
        self,
        recipient: Recipient,
        *,
        setting: str | Enum | None,
        title: str | None = None,
        body: str | None = None,
        data: dict[str, Any] | None = None,
        sender: Party | None = None,
    ) -> Message | ErrorResult:
        """
        Record a push notification for a recipient, if they accept its category.

        Args:
            recipient: Driver, customer or vendor receiving the message
            setting: Notification category gating the message
            title: Notification title
            body: Notification body
            data: Payload for the client; ``messageType`` becomes the message type
            sender: Party the message is sent on behalf of

        Returns:
            The persisted Message, or an ErrorResult
        """
        if not (setting and allows_notification(recipient, setting)):
            return ErrorResult.refusal(
                f"{recipient.kind} has turned off notification setting: {category_key(setting)}",
                status=200,
            )

        data = dict(data or {})
        message = Message(
            message_type=data.get("messageType"),
            recipient=recipient.party,
            sender=sender,
            title=title,
            body=body,
            data=data,
            device_tokens=list(recipient.device_tokens),
        )
        await self.repository.save(message)

        self.logger.log_dispatch(
            message_type=message.message_type,
            recipient_kind=recipient.kind,
            recipient_id=str(recipient.id),
            message_id=str(message.id),
        )

        if self.push_transport is not None:
            await self._push(message)

        return message

    @guarded("send_email")
    async def send_email(
        self,
        recipient: Recipient,
        *,
        setting: str | Enum | None,
        subject: str,
        text: str | None = None,
        html: str | None = None,
    ) -> MailDelivery | ErrorResult:
        """
        Email a recipient, if they accept the category. ACCOUNT mail always goes out.

        Returns:
            The transport's delivery result, or an ErrorResult
        """
        if not allows_email(recipient, setting):
            return ErrorResult.refusal(
                f"{recipient.kind} has turned off email setting: {category_key(setting)}",
                status=200,
            )

        if not recipient.email:
            raise ValueError(f"{recipient.kind} {recipient.id} has no email address")

        return await self.mail_transport.send_mail(
            to=recipient.email,
            subject=subject,
            text=text,
            html=html,
        )

    async def _push(self, message: Message) -> None:
        """Fan a persisted message out; the record stands even if this fails."""
        try:
            await self.push_transport.push(message)
        except Exception as e:
            self.logger.logger.warning(
                "push_failed",
                message_id=str(message.id),
                error=str(e),
            )
