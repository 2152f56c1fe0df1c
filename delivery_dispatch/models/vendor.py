"""Vendor, address and menu models."""

from decimal import Decimal
from uuid import UUID

from pydantic import Field

from delivery_dispatch.models.base import Entity, Recipient


class Address(Entity):
    """Postal address used for pickups and deliveries."""

    kind = "Address"

    street: str
    unit: str | None = None
    city: str
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class Vendor(Recipient):
    """Restaurant or shop that sells through the marketplace."""

    kind = "Vendor"

    business_name: str
    phone_number: str | None = None
    address: Address | None = None


class MenuItem(Entity):
    """Item on a vendor's menu."""

    kind = "MenuItem"
    relations = {"vendor": "Vendor"}

    vendor: UUID
    name: str
    price: Decimal = Field(ge=0)
    description: str | None = None
