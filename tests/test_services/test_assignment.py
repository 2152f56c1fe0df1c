"""Tests for driver availability, offers and route management."""

import asyncio
from decimal import Decimal
from uuid import uuid4

import pytest

from delivery_dispatch.models.base import Party, PartyKind
from delivery_dispatch.models.driver import Driver, DriverStatus
from delivery_dispatch.models.message import Message
from delivery_dispatch.models.order import Order
from delivery_dispatch.models.results import ErrorResult
from delivery_dispatch.services.assignment import DriverService, format_amount
from delivery_dispatch.services.communications import LoggingMailTransport, MailDelivery
from delivery_dispatch.state.repository import Repository
from delivery_dispatch.utils.security import hash_password


class TestRequestDriver:
    """Tests for offering an order to a driver."""

    @pytest.mark.asyncio
    async def test_offer_is_sent(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]
        order: Order = stored_world["order"]

        result = await driver_service.request_driver(driver, order)

        assert isinstance(result, Message)
        assert result.title == "Incoming Order!"
        assert result.body == "New order from Luigi's Trattoria."
        assert result.sender == Party(kind=PartyKind.VENDOR, id=stored_world["vendor"].id)
        assert result.data == {
            "orderId": str(order.id),
            "messageType": "REQUEST_DRIVER",
            "openModal": "true",
            "businessName": "Luigi's Trattoria",
            "customerName": "Ada L",
            "businessAddress": "10 Main St, Springfield, IL 62701",
            "customerAddress": "221 Elm St Apt 4, Springfield, IL 62701",
            "tip": "5",
        }
        assert await repository.load(Message, result.id) == result

    @pytest.mark.asyncio
    async def test_offer_does_not_link_records(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]
        order: Order = stored_world["order"]

        await driver_service.request_driver(driver, order)

        assert (await repository.load(Order, order.id)).driver is None
        assert (await repository.load(Driver, driver.id)).orders == []

    @pytest.mark.asyncio
    async def test_assigned_order_is_refused(
        self,
        driver_service: DriverService,
        stored_world: dict,
        stored_keys,
    ) -> None:
        order: Order = stored_world["order"]
        order.driver = uuid4()

        result = await driver_service.request_driver(stored_world["driver"], order)

        assert isinstance(result, ErrorResult)
        assert result.is_refusal
        assert result.error.message == "Order already has a driver assigned."
        assert await stored_keys("Message") == []

    @pytest.mark.asyncio
    async def test_driver_busy_for_other_vendor_is_refused(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
        stored_keys,
    ) -> None:
        driver: Driver = stored_world["driver"]
        elsewhere = Order(customer=stored_world["customer"].id, vendor=stored_world["other_vendor"].id)
        await repository.save(elsewhere)
        driver.orders = [elsewhere.id]

        result = await driver_service.request_driver(driver, stored_world["order"])

        assert result.is_refusal
        assert result.error.message == "Driver is currently delivering for another vendor."
        assert await stored_keys("Message") == []

    @pytest.mark.asyncio
    async def test_driver_busy_for_same_vendor_is_offered(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]
        same_vendor = Order(customer=stored_world["customer"].id, vendor=stored_world["vendor"].id)
        await repository.save(same_vendor)
        driver.orders = [same_vendor.id]

        result = await driver_service.request_driver(driver, stored_world["order"])

        assert isinstance(result, Message)

    @pytest.mark.asyncio
    async def test_offline_driver_is_refused(
        self,
        driver_service: DriverService,
        stored_world: dict,
        stored_keys,
    ) -> None:
        driver: Driver = stored_world["driver"]
        driver.status = DriverStatus.INACTIVE

        result = await driver_service.request_driver(driver, stored_world["order"])

        assert result.is_refusal
        assert result.error.message == "Driver is offline."
        assert await stored_keys("Message") == []

    @pytest.mark.asyncio
    async def test_missing_vendor_is_a_failure(
        self,
        driver_service: DriverService,
        stored_world: dict,
    ) -> None:
        order = Order(customer=stored_world["customer"].id, vendor=uuid4())

        result = await driver_service.request_driver(stored_world["driver"], order)

        assert result.is_failure
        assert result.error.function_name == "request_driver"
        assert "Vendor" in result.error.error_string

    @pytest.mark.asyncio
    async def test_disabled_notifications_pass_through(
        self,
        driver_service: DriverService,
        stored_world: dict,
        stored_keys,
    ) -> None:
        driver: Driver = stored_world["driver"]
        driver.notification_settings = {"REQUEST_DRIVER": False}

        result = await driver_service.request_driver(driver, stored_world["order"])

        assert result.as_dict() == {
            "error": {
                "kind": "refusal",
                "message": "Driver has turned off notification setting: REQUEST_DRIVER",
                "status": 200,
            }
        }
        assert await stored_keys("Message") == []


class TestNotifications:
    @pytest.mark.asyncio
    async def test_order_ready(self, driver_service: DriverService, stored_world: dict) -> None:
        order: Order = stored_world["order"]

        result = await driver_service.notify_order_ready(
            stored_world["driver"], stored_world["vendor"], order
        )

        assert isinstance(result, Message)
        assert result.title == "Order up!"
        assert result.data == {
            "orderId": str(order.id),
            "messageType": "ORDER_READY",
            "openModal": "false",
        }

    @pytest.mark.asyncio
    async def test_order_canceled(self, driver_service: DriverService, stored_world: dict) -> None:
        result = await driver_service.notify_order_canceled(
            stored_world["driver"], stored_world["vendor"], stored_world["order"]
        )

        assert result.title == "Order canceled."
        assert result.data["messageType"] == "ORDER_CANCELED"

    @pytest.mark.asyncio
    async def test_notifications_follow_request_driver_setting(
        self, driver_service: DriverService, stored_world: dict
    ) -> None:
        driver: Driver = stored_world["driver"]
        driver.notification_settings["REQUEST_DRIVER"] = False

        result = await driver_service.notify_order_ready(
            driver, stored_world["vendor"], stored_world["order"]
        )

        assert result.is_refusal


class TestToggleStatus:
    @pytest.mark.asyncio
    async def test_go_offline_and_online(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]

        assert await driver_service.toggle_status(driver, "INACTIVE") == DriverStatus.INACTIVE
        assert (await repository.load(Driver, driver.id)).status == DriverStatus.INACTIVE

        assert await driver_service.toggle_status(driver, DriverStatus.ACTIVE) == DriverStatus.ACTIVE
        assert driver.status == DriverStatus.ACTIVE
        assert (await repository.load(Driver, driver.id)).status == DriverStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_cannot_go_offline_with_orders(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]
        driver.orders = [stored_world["order"].id]

        result = await driver_service.toggle_status(driver, DriverStatus.INACTIVE)

        assert result.as_dict() == {
            "error": {
                "kind": "refusal",
                "message": "There are still active orders on your route!",
                "status": 418,
                "functionName": "toggle_status",
            }
        }
        assert driver.status == DriverStatus.ACTIVE
        assert (await repository.load(Driver, driver.id)).status == DriverStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_unknown_status_is_refused(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]

        result = await driver_service.toggle_status(driver, "BUSY")

        assert result.as_dict() == {
            "error": {
                "kind": "refusal",
                "message": "Unknown status: BUSY",
                "status": 400,
                "functionName": "toggle_status",
            }
        }
        assert driver.status == DriverStatus.ACTIVE
        assert (await repository.load(Driver, driver.id)).status == DriverStatus.ACTIVE


@pytest.mark.asyncio
async def test_add_device_token(
    driver_service: DriverService,
    repository: Repository,
    stored_world: dict,
) -> None:
    driver: Driver = stored_world["driver"]

    await driver_service.add_device_token(driver, "device-b")
    await driver_service.add_device_token(driver, "device-a")

    assert driver.device_tokens == ["device-b", "device-a"]
    assert (await repository.load(Driver, driver.id)).device_tokens == ["device-b", "device-a"]


class TestRoute:
    """Tests for linking orders to a driver's route."""

    @pytest.mark.asyncio
    async def test_assign_links_both_records(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]
        order: Order = stored_world["order"]

        result = await driver_service.assign_order(driver, order)

        assert result is driver
        assert driver.orders == [order.id]
        assert order.driver == driver.id
        assert (await repository.load(Driver, driver.id)).orders == [order.id]
        assert (await repository.load(Order, order.id)).driver == driver.id

    @pytest.mark.asyncio
    async def test_second_assign_is_refused(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        order: Order = stored_world["order"]
        rival = Driver(email="rival@example.com", password="x", status=DriverStatus.ACTIVE)
        await repository.save(rival)
        await driver_service.assign_order(stored_world["driver"], order)

        # A stale copy of the order does not hide the stored assignment
        stale = order.model_copy(update={"driver": None})
        result = await driver_service.assign_order(rival, stale)

        assert result.is_refusal
        assert result.error.message == "Order already has a driver assigned."
        assert rival.orders == []
        assert (await repository.load(Driver, rival.id)).orders == []

    @pytest.mark.asyncio
    async def test_concurrent_assign_has_one_winner(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        order: Order = stored_world["order"]
        rival = Driver(email="rival@example.com", password="x", status=DriverStatus.ACTIVE)
        await repository.save(rival)

        results = await asyncio.gather(
            driver_service.assign_order(stored_world["driver"], order.model_copy()),
            driver_service.assign_order(rival, order.model_copy()),
        )

        winners = [r for r in results if isinstance(r, Driver)]
        losers = [r for r in results if isinstance(r, ErrorResult)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert losers[0].is_refusal

        stored = await repository.load(Order, order.id)
        assert stored.driver == winners[0].id

    @pytest.mark.asyncio
    async def test_complete_moves_order_to_history(
        self,
        driver_service: DriverService,
        repository: Repository,
        stored_world: dict,
    ) -> None:
        driver: Driver = stored_world["driver"]
        order: Order = stored_world["order"]
        await driver_service.assign_order(driver, order)

        result = await driver_service.complete_order(driver, order)

        assert result is driver
        assert driver.orders == []
        assert driver.order_history == [order.id]
        stored = await repository.load(Driver, driver.id)
        assert stored.orders == []
        assert stored.order_history == [order.id]

    @pytest.mark.asyncio
    async def test_complete_unknown_order_is_refused(
        self,
        driver_service: DriverService,
        stored_world: dict,
    ) -> None:
        result = await driver_service.complete_order(stored_world["driver"], stored_world["order"])

        assert result.is_refusal
        assert result.error.status == 404
        assert result.error.function_name == "complete_order"


class TestAccount:
    def test_validate_password(self, driver_service: DriverService) -> None:
        driver = Driver(email="driver@example.com", password=hash_password("hunter22"))

        assert driver_service.validate_password(driver, "hunter22")
        assert not driver_service.validate_password(driver, "hunter23")

    @pytest.mark.asyncio
    async def test_send_email(
        self,
        driver_service: DriverService,
        mail_transport: LoggingMailTransport,
        sample_driver: Driver,
    ) -> None:
        result = await driver_service.send_email(
            sample_driver, setting="ACCOUNT", subject="Welcome", text="Hi Sam"
        )

        assert isinstance(result, MailDelivery)
        assert mail_transport.sent[0].subject == "Welcome"

    @pytest.mark.asyncio
    async def test_send_email_refusal_passes_through(
        self,
        driver_service: DriverService,
        sample_driver: Driver,
    ) -> None:
        result = await driver_service.send_email(sample_driver, setting="PROMOTIONS", subject="Deals")

        assert result.is_refusal
        assert result.error.message == "Driver has turned off email setting: PROMOTIONS"


@pytest.mark.parametrize(
    "value, expected",
    [(Decimal("5.00"), "5"), (Decimal("2.50"), "2.5"), (Decimal("0"), "0"), (Decimal("10"), "10")],
)
def test_format_amount(value: Decimal, expected: str) -> None:
    assert format_amount(value) == expected
