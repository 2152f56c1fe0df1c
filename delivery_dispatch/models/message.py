"""Notification message models."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field

from delivery_dispatch.models.base import Entity, Party


class MessageType(str, Enum):
    """Kinds of notification events."""

    REQUEST_DRIVER = "REQUEST_DRIVER"
    ORDER_READY = "ORDER_READY"
    ORDER_CANCELED = "ORDER_CANCELED"
    CHAT = "CHAT"


class NotificationSetting(str, Enum):
    """Push categories a recipient can opt in or out of."""

    REQUEST_DRIVER = "REQUEST_DRIVER"
    CHAT = "CHAT"


class EmailSetting(str, Enum):
    """Email categories. ACCOUNT mail is always delivered."""

    ACCOUNT = "ACCOUNT"


class Message(Entity):
    """A single notification event, kept as an audit and delivery record."""

    kind = "Message"

    model_config = ConfigDict(frozen=True)

    message_type: str | None = None
    recipient: Party
    sender: Party | None = None
    title: str | None = None
    body: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    device_tokens: list[str] = Field(default_factory=list)
    created_on: datetime = Field(default_factory=datetime.utcnow)
