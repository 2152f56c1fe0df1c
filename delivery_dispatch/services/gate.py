"""Per-recipient notification and email opt-in checks."""

from enum import Enum

from delivery_dispatch.models.base import Recipient
from delivery_dispatch.models.message import EmailSetting


class Channel(str, Enum):
    """Delivery channels a category can be gated on."""

    EMAIL = "email"
    PUSH = "push"


def category_key(category: str | Enum | None) -> str | None:
    if isinstance(category, Enum):
        return category.value
    return category


def allows_email(recipient: Recipient, category: str | Enum | None) -> bool:
    """
    Check whether a recipient accepts email of a category.

    ACCOUNT mail is always delivered. Any other category must be set to
    true in the recipient's email settings; unset means no.
    """
    key = category_key(category)
    if key == EmailSetting.ACCOUNT.value:
        return True
    if not key:
        return False
    return bool(recipient.email_settings.get(key, False))


def allows_notification(recipient: Recipient, category: str | Enum | None) -> bool:
    """
    Check whether a recipient accepts pushes of a category.

    A missing category is never an implicit allow.
    """
    key = category_key(category)
    if not key:
        return False
    return bool(recipient.notification_settings.get(key, False))


def allows(
    recipient: Recipient,
    category: str | Enum | None,
    channel: Channel = Channel.PUSH,
) -> bool:
    """Check a category against the settings map of the given channel."""
    if channel == Channel.EMAIL:
        return allows_email(recipient, category)
    return allows_notification(recipient, category)
