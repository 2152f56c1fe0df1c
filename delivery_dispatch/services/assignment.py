"""Driver Availability & Assignment - offers orders to drivers and manages their route."""

from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from redis.exceptions import WatchError

from delivery_dispatch.models.customer import Customer
from delivery_dispatch.models.driver import Driver, DriverStatus
from delivery_dispatch.models.message import Message, MessageType, NotificationSetting
from delivery_dispatch.models.order import Order
from delivery_dispatch.models.results import ErrorResult
from delivery_dispatch.models.vendor import Vendor
from delivery_dispatch.services.base import BaseService, RefusalError, guarded
from delivery_dispatch.services.communications import MailDelivery
from delivery_dispatch.services.messaging import MessageDispatcher
from delivery_dispatch.state.repository import Repository
from delivery_dispatch.utils.location import format_address, format_addresses
from delivery_dispatch.utils.security import verify_password


def format_amount(value: Decimal) -> str:
    """Render an amount without trailing zeros: ``5.00 -> "5"``, ``2.50 -> "2.5"``."""
    return f"{value.normalize():f}"


def _require(entity: Any, kind: str, entity_id: UUID | None) -> Any:
    if entity is None:
        raise LookupError(f"{kind} {entity_id} not found")
    return entity


class DriverService(BaseService):
    """
    Driver-facing operations.

    Responsibilities:
    - Offer orders to drivers, enforcing one driver per order and one
      vendor per route
    - Notify drivers about orders that are ready or canceled
    - Toggle driver availability and register devices
    - Link and unlink orders on a driver's route atomically
    """

    def __init__(self, repository: Repository, dispatcher: MessageDispatcher):
        super().__init__("driver_service", repository)
        self.dispatcher = dispatcher

    async def _check_available(self, driver: Driver, order: Order) -> ErrorResult | None:
        """Return the refusal that stops ``driver`` from taking ``order``, if any."""
        if order.driver:
            return ErrorResult.refusal("Order already has a driver assigned.")

        if driver.orders:
            route = await self.repository.load_many(Order, driver.orders)
            if any(current.vendor != order.vendor for current in route if current is not None):
                return ErrorResult.refusal("Driver is currently delivering for another vendor.")

        if driver.status == DriverStatus.INACTIVE:
            return ErrorResult.refusal("Driver is offline.")

        return None

    @guarded("request_driver")
    async def request_driver(self, driver: Driver, order: Order) -> Message | ErrorResult:
        """
        Offer an order to a driver.

        Checks that the order is unassigned, that the driver's current route
        is for the same vendor and that the driver is active, then sends the
        driver a REQUEST_DRIVER message. Nothing is linked here; see
        ``assign_order``.

        Args:
            driver: Driver being asked
            order: Order that needs delivering

        Returns:
            The persisted Message, or the refusal/failure that stopped it
        """
        refusal = await self._check_available(driver, order)
        if refusal:
            return refusal

        related = await self.repository.populate(order, ["vendor", "customer", "address"])
        vendor: Vendor = _require(related["vendor"], "Vendor", order.vendor)
        customer: Customer = _require(related["customer"], "Customer", order.customer)

        data = {
            "orderId": str(order.id),
            "messageType": MessageType.REQUEST_DRIVER.value,
            "openModal": "true",
            "businessName": vendor.business_name,
            "customerName": customer.display_name,
            "businessAddress": format_address(vendor.address),
            "customerAddress": format_addresses(related["address"]),
            "tip": format_amount(order.tip),
        }

        return await self.dispatcher.send_message(
            driver,
            setting=NotificationSetting.REQUEST_DRIVER,
            title="Incoming Order!",
            body=f"New order from {vendor.business_name}.",
            data=data,
            sender=vendor.party,
        )

    @guarded("notify_order_ready")
    async def notify_order_ready(
        self, driver: Driver, vendor: Vendor, order: Order
    ) -> Message | ErrorResult:
        """Tell the driver the order is ready for pickup."""
        return await self._notify(
            driver,
            vendor,
            order,
            message_type=MessageType.ORDER_READY,
            title="Order up!",
            body=f"The order at {vendor.business_name} is ready.",
        )

    @guarded("notify_order_canceled")
    async def notify_order_canceled(
        self, driver: Driver, vendor: Vendor, order: Order
    ) -> Message | ErrorResult:
        """Tell the driver the order was canceled."""
        return await self._notify(
            driver,
            vendor,
            order,
            message_type=MessageType.ORDER_CANCELED,
            title="Order canceled.",
            body=f"The order for {vendor.business_name} has been canceled.",
        )

    async def _notify(
        self,
        driver: Driver,
        vendor: Vendor,
        order: Order,
        message_type: MessageType,
        title: str,
        body: str,
    ) -> Message | ErrorResult:
        return await self.dispatcher.send_message(
            driver,
            setting=NotificationSetting.REQUEST_DRIVER,
            title=title,
            body=body,
            data={
                "orderId": str(order.id),
                "messageType": message_type.value,
                "openModal": "false",
            },
            sender=vendor.party,
        )

    @guarded("toggle_status")
    async def toggle_status(
        self, driver: Driver, status: DriverStatus | str
    ) -> DriverStatus | ErrorResult:
        """Set the driver ACTIVE or INACTIVE. Drivers with orders cannot go INACTIVE."""
        try:
            status = DriverStatus(status)
        except ValueError:
            return ErrorResult.refusal(
                f"Unknown status: {status}",
                status=400,
                function_name="toggle_status",
            )

        if status == DriverStatus.INACTIVE and driver.has_active_orders:
            return ErrorResult.refusal(
                "There are still active orders on your route!",
                status=418,
                function_name="toggle_status",
            )

        await self.repository.save(driver.model_copy(update={"status": status}))
        driver.status = status

        self.logger.logger.info(
            "driver_status_changed", driver_id=str(driver.id), status=status.value
        )
        return status

    @guarded("add_device_token")
    async def add_device_token(self, driver: Driver, token: str) -> Driver | ErrorResult:
        """Register a device, moving an already known token to the end."""
        tokens = [existing for existing in driver.device_tokens if existing != token]
        tokens.append(token)

        await self.repository.save(driver.model_copy(update={"device_tokens": tokens}))
        driver.device_tokens = tokens
        return driver

    @guarded("assign_order")
    async def assign_order(self, driver: Driver, order: Order) -> Driver | ErrorResult:
        """
        Put an order on the driver's route.

        The availability checks run again against freshly read records and
        both records are written in one optimistic transaction, so two
        concurrent claims on the same driver or order cannot both succeed.
        """

        async def claim(fresh_driver: Driver | None, fresh_order: Order | None) -> list[Any]:
            fresh_driver = _require(fresh_driver, "Driver", driver.id)
            fresh_order = _require(fresh_order, "Order", order.id)

            refusal = await self._check_available(fresh_driver, fresh_order)
            if refusal:
                raise RefusalError(refusal)

            fresh_order.driver = fresh_driver.id
            fresh_driver.orders.append(fresh_order.id)
            return [fresh_driver, fresh_order]

        try:
            saved_driver, saved_order = await self.repository.compare_and_set(
                [driver, order], claim
            )
        except WatchError:
            return ErrorResult.refusal(
                "Driver or order changed while assigning; try again.",
                status=409,
                function_name="assign_order",
            )

        driver.orders = saved_driver.orders
        driver.status = saved_driver.status
        order.driver = saved_order.driver

        self.logger.logger.info(
            "order_assigned", driver_id=str(driver.id), order_id=str(order.id)
        )
        return driver

    @guarded("complete_order")
    async def complete_order(self, driver: Driver, order: Order) -> Driver | ErrorResult:
        """Move an order from the driver's route to their history."""

        async def release(fresh_driver: Driver | None) -> list[Any]:
            fresh_driver = _require(fresh_driver, "Driver", driver.id)
            if order.id not in fresh_driver.orders:
                raise RefusalError(
                    ErrorResult.refusal(
                        "Order is not on this driver's route.",
                        status=404,
                        function_name="complete_order",
                    )
                )

            fresh_driver.orders = [o for o in fresh_driver.orders if o != order.id]
            if order.id not in fresh_driver.order_history:
                fresh_driver.order_history.append(order.id)
            return [fresh_driver]

        try:
            (saved_driver,) = await self.repository.compare_and_set([driver], release)
        except WatchError:
            return ErrorResult.refusal(
                "Driver changed while completing the order; try again.",
                status=409,
                function_name="complete_order",
            )

        driver.orders = saved_driver.orders
        driver.order_history = saved_driver.order_history
        return driver

    @guarded("send_email")
    async def send_email(
        self,
        driver: Driver,
        *,
        setting: str | Enum | None,
        subject: str,
        text: str | None = None,
        html: str | None = None,
    ) -> MailDelivery | ErrorResult:
        """Email a driver through the dispatcher's gate."""
        return await self.dispatcher.send_email(
            driver, setting=setting, subject=subject, text=text, html=html
        )

    def validate_password(self, driver: Driver, password: str) -> bool:
        """Check a plain-text password against the driver's stored hash."""
        return verify_password(password, driver.password)
