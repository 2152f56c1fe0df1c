"""Order-related data models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from delivery_dispatch.models.base import Entity


class Disposition(str, Enum):
    """Order disposition progression."""

    NEW = "NEW"
    PAID = "PAID"
    COMPLETE = "COMPLETE"
    CANCELED = "CANCELED"
    DELIVERED = "DELIVERED"


class FulfillmentMethod(str, Enum):
    """How the order reaches the customer."""

    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class ModificationOption(BaseModel):
    """A selected option of a menu item modification."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    price: Decimal = Decimal("0")


class Modification(BaseModel):
    """A modification applied to an order item, with its selected options."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    options: list[ModificationOption] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def normalize_options(cls, v: Any) -> list[Any]:
        """Accept a single option object as well as a list of them."""
        return _as_list(v)

    @classmethod
    def from_raw(cls, raw: Any) -> Any:
        """A bare option (has a price, no options) becomes a one-option modification."""
        if isinstance(raw, dict) and "options" not in raw and "price" in raw:
            return {"name": raw.get("name"), "options": [raw]}
        return raw


class OrderItem(Entity):
    """Item in an order, priced at the time it was added."""

    kind = "OrderItem"
    relations = {"menu_item": "MenuItem"}

    menu_item: UUID
    price: Decimal = Decimal("0")
    modifications: list[Modification] = Field(default_factory=list)

    @field_validator("modifications", mode="before")
    @classmethod
    def normalize_modifications(cls, v: Any) -> list[Any]:
        """Accept a single modification object as well as a list of them."""
        return [Modification.from_raw(raw) for raw in _as_list(v)]

    def surcharge(self) -> Decimal:
        """Sum of the prices of every selected modification option."""
        return sum(
            (option.price for modification in self.modifications for option in modification.options),
            Decimal("0"),
        )


class Order(Entity):
    """Vendor order placed by a customer."""

    kind = "Order"
    relations = {
        "customer": "Customer",
        "address": "Address",
        "vendor": "Vendor",
        "order_items": "OrderItem",
        "driver": "Driver",
    }

    customer: UUID
    address: list[UUID] = Field(default_factory=list)
    vendor: UUID
    order_items: list[UUID] = Field(default_factory=list)
    driver: UUID | None = None
    method: FulfillmentMethod = FulfillmentMethod.PICKUP

    # Pricing
    total: Decimal = Decimal("0")
    tip: Decimal = Field(default=Decimal("0"), ge=0)
    amount_paid: Decimal | None = None
    charge_id: str | None = None

    created_on: datetime = Field(default_factory=datetime.utcnow)
    disposition: Disposition = Disposition.NEW

    @field_validator("address", mode="before")
    @classmethod
    def normalize_address(cls, v: Any) -> list[Any]:
        """A single delivery address id is stored as a one-element list."""
        return _as_list(v)
