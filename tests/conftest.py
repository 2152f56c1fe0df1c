"""Pytest configuration and fixtures."""

from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fakeredis import FakeServer
from fakeredis import aioredis as fake_aioredis

from delivery_dispatch.models.customer import Customer
from delivery_dispatch.models.driver import Driver, DriverStatus
from delivery_dispatch.models.order import Order
from delivery_dispatch.models.vendor import Address, MenuItem, Vendor
from delivery_dispatch.services.assignment import DriverService
from delivery_dispatch.services.communications import (
    LoggingMailTransport,
    LoggingPushTransport,
)
from delivery_dispatch.services.lifecycle import OrderLifecycle
from delivery_dispatch.services.messaging import MessageDispatcher
from delivery_dispatch.services.pricing import OrderLedger
from delivery_dispatch.state.manager import StateManager
from delivery_dispatch.state.repository import Repository


@pytest_asyncio.fixture
async def state_manager() -> AsyncGenerator[StateManager, None]:
    """Create a state manager backed by an isolated in-memory Redis."""
    client = fake_aioredis.FakeRedis(server=FakeServer(), decode_responses=True)
    manager = StateManager(redis_client=client)
    await manager.connect()
    yield manager
    await manager.disconnect()


@pytest.fixture
def repository(state_manager: StateManager) -> Repository:
    """Create a test repository."""
    return Repository(state_manager)


@pytest.fixture
def mail_transport() -> LoggingMailTransport:
    """Fresh mail transport for each test."""
    return LoggingMailTransport(sender="dispatch@example.com")


@pytest.fixture
def push_transport() -> LoggingPushTransport:
    """Fresh push transport for each test."""
    return LoggingPushTransport()


@pytest.fixture
def dispatcher(
    repository: Repository,
    mail_transport: LoggingMailTransport,
    push_transport: LoggingPushTransport,
) -> MessageDispatcher:
    """Create a message dispatcher with logging transports."""
    return MessageDispatcher(repository, mail_transport, push_transport)


@pytest.fixture
def ledger(repository: Repository) -> OrderLedger:
    return OrderLedger(repository)


@pytest.fixture
def lifecycle(repository: Repository) -> OrderLifecycle:
    return OrderLifecycle(repository, enforce_transitions=False)


@pytest.fixture
def driver_service(repository: Repository, dispatcher: MessageDispatcher) -> DriverService:
    return DriverService(repository, dispatcher)


@pytest.fixture
def stored_keys(state_manager: StateManager):
    """List the Redis keys holding entities of a kind."""

    async def _keys(kind: str) -> list[str]:
        return await state_manager.redis_client.keys(f"{kind}:*")

    return _keys


# Sample data fixtures


@pytest.fixture
def sample_address() -> Address:
    """Create a sample delivery address."""
    return Address(
        street="221 Elm St",
        unit="Apt 4",
        city="Springfield",
        state="IL",
        zip_code="62701",
    )


@pytest.fixture
def sample_vendor() -> Vendor:
    """Create a sample vendor with an embedded pickup address."""
    return Vendor(
        business_name="Luigi's Trattoria",
        email="orders@luigis.example.com",
        address=Address(street="10 Main St", city="Springfield", state="IL", zip_code="62701"),
    )


@pytest.fixture
def other_vendor() -> Vendor:
    """Create a second vendor."""
    return Vendor(business_name="Taco Town", email="hola@tacotown.example.com")


@pytest.fixture
def sample_customer() -> Customer:
    """Create a sample customer."""
    return Customer(
        email="ada@example.com",
        first_name="Ada",
        last_name="Lovelace",
    )


@pytest.fixture
def sample_menu_item(sample_vendor: Vendor) -> MenuItem:
    """Create a sample menu item priced at 10."""
    return MenuItem(vendor=sample_vendor.id, name="Margherita Pizza", price=Decimal("10"))


@pytest.fixture
def sample_driver() -> Driver:
    """Create an active driver with an empty route."""
    return Driver(
        email="driver@example.com",
        password="not-a-real-hash",
        first_name="Sam",
        last_name="Rivers",
        status=DriverStatus.ACTIVE,
        device_tokens=["device-a"],
    )


@pytest.fixture
def sample_order(
    sample_vendor: Vendor,
    sample_customer: Customer,
    sample_address: Address,
) -> Order:
    """Create a new order with a 5.00 tip."""
    return Order(
        customer=sample_customer.id,
        vendor=sample_vendor.id,
        address=[sample_address.id],
        tip=Decimal("5.00"),
    )


@pytest_asyncio.fixture
async def stored_world(
    repository: Repository,
    sample_vendor: Vendor,
    other_vendor: Vendor,
    sample_customer: Customer,
    sample_address: Address,
    sample_menu_item: MenuItem,
    sample_driver: Driver,
    sample_order: Order,
) -> dict:
    """Persist the sample records."""
    for entity in (
        sample_vendor,
        other_vendor,
        sample_customer,
        sample_address,
        sample_menu_item,
        sample_driver,
        sample_order,
    ):
        await repository.save(entity)

    return {
        "vendor": sample_vendor,
        "other_vendor": other_vendor,
        "customer": sample_customer,
        "address": sample_address,
        "menu_item": sample_menu_item,
        "driver": sample_driver,
        "order": sample_order,
    }
