"""Customer-related models."""

from datetime import datetime

from pydantic import Field

from delivery_dispatch.models.base import Recipient


class Customer(Recipient):
    """Customer profile."""

    kind = "Customer"

    first_name: str | None = Field(default=None, max_length=64)
    last_name: str | None = Field(default=None, max_length=64)
    phone_number: str | None = None
    created_on: datetime = Field(default_factory=datetime.utcnow)

    @property
    def display_name(self) -> str:
        """First name and last-name initial, as shown to drivers."""
        initial = (self.last_name or "")[:1]
        return " ".join(part for part in (self.first_name, initial) if part)
