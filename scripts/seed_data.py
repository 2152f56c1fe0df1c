"""Seed a vendor, its menu, a customer and a pool of drivers."""

import asyncio
from decimal import Decimal

from delivery_dispatch.config import get_settings
from delivery_dispatch.engine import create_engine
from delivery_dispatch.models.customer import Customer
from delivery_dispatch.models.driver import Driver, DriverStatus
from delivery_dispatch.models.order import Order, OrderItem
from delivery_dispatch.models.vendor import Address, MenuItem, Vendor
from delivery_dispatch.utils.logging import setup_logging
from delivery_dispatch.utils.security import hash_password


async def seed_vendor(engine) -> tuple[Vendor, list[MenuItem]]:
    """Seed a vendor and its menu."""
    print("Seeding vendor and menu...")

    vendor = Vendor(
        business_name="Luigi's Trattoria",
        email="orders@luigis.example.com",
        phone_number="+15555550100",
        address=Address(
            street="10 Main St",
            city="Springfield",
            state="IL",
            zip_code="62701",
            latitude=39.7990,
            longitude=-89.6440,
        ),
    )
    await engine.repository.save(vendor)

    menu = [
        MenuItem(vendor=vendor.id, name="Margherita Pizza", price=Decimal("12.00")),
        MenuItem(vendor=vendor.id, name="Pepperoni Pizza", price=Decimal("14.00")),
        MenuItem(vendor=vendor.id, name="Caesar Salad", price=Decimal("8.50")),
        MenuItem(vendor=vendor.id, name="Tiramisu", price=Decimal("6.00")),
    ]
    for item in menu:
        await engine.repository.save(item)
        print(f"  ✓ Added {item.name} ({item.price})")

    print(f"✓ {vendor.business_name} seeded successfully\n")
    return vendor, menu


async def seed_drivers(engine) -> None:
    """Seed driver pool."""
    print("Seeding drivers...")

    drivers = [
        Driver(
            email="john.smith@example.com",
            password=hash_password("change-me"),
            first_name="John",
            last_name="Smith",
            status=DriverStatus.ACTIVE,
            online=True,
            latitude=39.8010,
            longitude=-89.6500,
        ),
        Driver(
            email="maria.garcia@example.com",
            password=hash_password("change-me"),
            first_name="Maria",
            last_name="Garcia",
            status=DriverStatus.ACTIVE,
            online=True,
            latitude=39.7950,
            longitude=-89.6400,
        ),
        Driver(
            email="ahmed.khan@example.com",
            password=hash_password("change-me"),
            first_name="Ahmed",
            last_name="Khan",
        ),
    ]

    for driver in drivers:
        await engine.repository.save(driver)
        print(f"  ✓ Added {driver.first_name} {driver.last_name} ({driver.status.value})")

    print("✓ Drivers seeded successfully\n")


async def seed_sample_order(engine, vendor: Vendor, menu: list[MenuItem]) -> None:
    """Seed a customer with one priced order."""
    print("Seeding sample order...")

    customer = Customer(
        email="jane.smith@example.com",
        phone_number="+15555550123",
        first_name="Jane",
        last_name="Smith",
    )
    address = Address(street="456 Park Ave", city="Springfield", state="IL", zip_code="62702")
    order = Order(customer=customer.id, vendor=vendor.id, address=[address.id], tip=Decimal("4"))

    await engine.repository.commit(save=[customer, address, order])

    for item in (
        OrderItem(
            menu_item=menu[0].id,
            modifications=[{"name": "Extra cheese", "options": [{"price": "1.50"}]}],
        ),
        OrderItem(menu_item=menu[2].id),
    ):
        result = await engine.ledger.add_order_item(order, item)
        if result is not order:
            raise RuntimeError(f"Could not add item: {result.as_dict()}")

    print(f"  ✓ Order {order.id} for {customer.display_name} (total: {order.total})")
    print("✓ Sample order seeded successfully\n")


async def main() -> None:
    """Run all seed functions."""
    settings = get_settings()
    setup_logging()

    print("\n" + "=" * 50)
    print("  Seeding Delivery Dispatch Data")
    print("=" * 50 + "\n")

    async with create_engine(settings=settings) as engine:
        vendor, menu = await seed_vendor(engine)
        await seed_drivers(engine)
        await seed_sample_order(engine, vendor, menu)

    print("=" * 50)
    print("  ✓ All data seeded successfully!")
    print("=" * 50 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
