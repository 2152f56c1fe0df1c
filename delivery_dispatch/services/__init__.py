"""Engine services."""

from delivery_dispatch.services.assignment import DriverService
from delivery_dispatch.services.communications import (
    LoggingMailTransport,
    LoggingPushTransport,
    MailDelivery,
    MailTransport,
    PushTransport,
)
from delivery_dispatch.services.lifecycle import DispositionTransitions, OrderLifecycle
from delivery_dispatch.services.messaging import MessageDispatcher
from delivery_dispatch.services.pricing import OrderLedger

__all__ = [
    "DriverService",
    "MessageDispatcher",
    "OrderLedger",
    "OrderLifecycle",
    "DispositionTransitions",
    "MailTransport",
    "PushTransport",
    "MailDelivery",
    "LoggingMailTransport",
    "LoggingPushTransport",
]
