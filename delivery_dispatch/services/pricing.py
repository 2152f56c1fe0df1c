"""Order Pricing & Item Ledger - prices items and keeps order totals in step."""

from decimal import Decimal
from uuid import UUID, uuid4

from delivery_dispatch.models.order import Order, OrderItem
from delivery_dispatch.models.results import ErrorResult
from delivery_dispatch.models.vendor import MenuItem
from delivery_dispatch.services.base import BaseService, guarded
from delivery_dispatch.state.repository import Repository


def _apply_totals(order: Order, updated: Order) -> None:
    order.order_items = updated.order_items
    order.total = updated.total


class OrderLedger(BaseService):
    """
    Adds and removes order items.

    Every change writes the item and the order in one transaction, and the
    caller's order object is only updated once that write succeeded, so
    ``order.total`` always equals the sum of its items' prices.
    """

    def __init__(self, repository: Repository):
        super().__init__("order_ledger", repository)

    @guarded("add_order_item")
    async def add_order_item(self, order: Order, item: OrderItem) -> Order | ErrorResult:
        """
        Price an item from its menu item and modifications and add it to the order.

        The item is stored as a new OrderItem; on success ``item`` takes the
        new id and price, so adding the same object twice yields two items.

        Args:
            order: Order receiving the item
            item: New item referencing a menu item

        Returns:
            The updated order, or an ErrorResult
        """
        menu_item = await self.repository.load(MenuItem, item.menu_item)
        if menu_item is None:
            return ErrorResult.refusal(f"Menu item {item.menu_item} not found.", status=404)

        price = menu_item.price + item.surcharge()
        priced = item.model_copy(update={"id": uuid4(), "price": price})
        updated = order.model_copy(
            update={
                "order_items": [*order.order_items, priced.id],
                "total": order.total + price,
            }
        )

        await self.repository.commit(save=[priced, updated])

        item.id = priced.id
        item.price = price
        _apply_totals(order, updated)

        self.logger.logger.info(
            "order_item_added",
            order_id=str(order.id),
            item_id=str(item.id),
            price=str(price),
            total=str(order.total),
        )
        return order

    @guarded("remove_order_item")
    async def remove_order_item(self, order: Order, item_id: UUID | str) -> Order | ErrorResult:
        """Remove an item from the order and delete its record."""
        item_id = UUID(str(item_id))
        if item_id not in order.order_items:
            return ErrorResult.refusal(
                f"Order item {item_id} is not part of this order.", status=404
            )

        order_item = await self.repository.load(OrderItem, item_id)
        price = order_item.price if order_item else Decimal("0")
        if order_item is None:
            self.logger.logger.warning(
                "order_item_missing", order_id=str(order.id), item_id=str(item_id)
            )

        remaining = list(order.order_items)
        remaining.remove(item_id)
        updated = order.model_copy(
            update={
                "order_items": remaining,
                "total": order.total - price,
            }
        )

        await self.repository.commit(
            save=[updated],
            remove=[order_item] if order_item else [],
        )
        _apply_totals(order, updated)

        self.logger.logger.info(
            "order_item_removed",
            order_id=str(order.id),
            item_id=str(item_id),
            total=str(order.total),
        )
        return order

    @guarded("recalculate_total")
    async def recalculate_total(self, order: Order) -> Order | ErrorResult:
        """Rebuild the total from the stored items, dropping references to deleted items."""
        items = await self.repository.load_many(OrderItem, order.order_items)
        present = [item for item in items if item is not None]

        updated = order.model_copy(
            update={
                "order_items": [item.id for item in present],
                "total": sum((item.price for item in present), Decimal("0")),
            }
        )
        await self.repository.save(updated)
        _apply_totals(order, updated)
        return order
