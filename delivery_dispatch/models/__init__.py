"""Data models for the dispatch engine."""

from delivery_dispatch.models.base import Entity, Party, PartyKind, Recipient
from delivery_dispatch.models.customer import Customer
from delivery_dispatch.models.driver import Driver, DriverStatus
from delivery_dispatch.models.message import (
    EmailSetting,
    Message,
    MessageType,
    NotificationSetting,
)
from delivery_dispatch.models.order import (
    Disposition,
    FulfillmentMethod,
    Modification,
    ModificationOption,
    Order,
    OrderItem,
)
from delivery_dispatch.models.results import ErrorDetail, ErrorKind, ErrorResult
from delivery_dispatch.models.vendor import Address, MenuItem, Vendor

__all__ = [
    # Base
    "Entity",
    "Party",
    "PartyKind",
    "Recipient",
    # Parties
    "Customer",
    "Driver",
    "DriverStatus",
    "Vendor",
    "Address",
    "MenuItem",
    # Messages
    "Message",
    "MessageType",
    "NotificationSetting",
    "EmailSetting",
    # Order
    "Order",
    "OrderItem",
    "Modification",
    "ModificationOption",
    "Disposition",
    "FulfillmentMethod",
    # Results
    "ErrorDetail",
    "ErrorKind",
    "ErrorResult",
]
