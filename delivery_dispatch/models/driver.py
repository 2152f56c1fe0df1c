"""Driver models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from delivery_dispatch.config import get_settings
from delivery_dispatch.models.base import Recipient


class DriverStatus(str, Enum):
    """Driver availability states."""

    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


def _default_notification_settings() -> dict[str, bool]:
    return dict(get_settings().default_notification_settings)


class Driver(Recipient):
    """Delivery driver account, presence and route."""

    kind = "Driver"
    relations = {"orders": "Order", "order_history": "Order"}

    email: EmailStr
    email_is_confirmed: bool = False
    password: str = Field(max_length=128)
    first_name: str | None = Field(default=None, max_length=64)
    last_name: str | None = Field(default=None, max_length=64)
    phone_number: str | None = None
    created_on: datetime = Field(default_factory=datetime.utcnow)
    visits: list[datetime] = Field(default_factory=list)
    last_visited: datetime = Field(default_factory=datetime.utcnow)

    # Presence
    online: bool = False
    latitude: float | None = None
    longitude: float | None = None
    status: DriverStatus = DriverStatus.INACTIVE

    notification_settings: dict[str, bool] = Field(
        default_factory=_default_notification_settings
    )

    # Route
    orders: list[UUID] = Field(default_factory=list)
    order_history: list[UUID] = Field(default_factory=list)

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        """Emails are capped at 64 characters."""
        if len(v) > 64:
            raise ValueError("Email must be at most 64 characters")
        return v

    @property
    def has_active_orders(self) -> bool:
        """Check if the driver still has orders on their route."""
        return bool(self.orders)
