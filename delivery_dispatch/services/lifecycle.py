"""Order disposition state machine."""

from delivery_dispatch.models.order import Disposition, Order
from delivery_dispatch.models.results import ErrorResult
from delivery_dispatch.services.base import BaseService, guarded
from delivery_dispatch.state.repository import Repository


class DispositionTransitions:
    """Declared order disposition transitions."""

    TRANSITIONS = {
        Disposition.NEW: [Disposition.PAID, Disposition.CANCELED],
        Disposition.PAID: [
            Disposition.COMPLETE,
            Disposition.CANCELED,
            Disposition.DELIVERED,  # delivery orders skip COMPLETE
        ],
        Disposition.COMPLETE: [Disposition.DELIVERED],
        Disposition.CANCELED: [],
        Disposition.DELIVERED: [],
    }

    @classmethod
    def can_transition(cls, from_state: Disposition, to_state: Disposition) -> bool:
        """Check if a disposition change follows a declared edge (or is a no-op)."""
        return from_state == to_state or to_state in cls.TRANSITIONS.get(from_state, [])


class OrderLifecycle(BaseService):
    """
    Writes order dispositions.

    By default any disposition can follow any other; callers own the
    legality of a change. With ``enforce_transitions`` on, changes outside
    ``DispositionTransitions`` are refused and nothing is written.
    """

    def __init__(self, repository: Repository, enforce_transitions: bool | None = None):
        super().__init__("order_lifecycle", repository)
        if enforce_transitions is None:
            enforce_transitions = self.settings.enforce_disposition_transitions
        self.enforce_transitions = enforce_transitions

    @guarded("change_disposition")
    async def change_disposition(
        self,
        order: Order,
        disposition: Disposition | str,
    ) -> Order | ErrorResult:
        """Set and persist the order's disposition."""
        try:
            disposition = Disposition(disposition)
        except ValueError:
            return ErrorResult.refusal(
                f"Unknown disposition: {disposition}",
                status=400,
                function_name="change_disposition",
            )

        if self.enforce_transitions and not DispositionTransitions.can_transition(
            order.disposition, disposition
        ):
            return ErrorResult.refusal(
                f"Order cannot move from {order.disposition.value} to {disposition.value}.",
                status=409,
                function_name="change_disposition",
            )

        previous = order.disposition
        await self.repository.save(order.model_copy(update={"disposition": disposition}))
        order.disposition = disposition

        self.logger.logger.info(
            "disposition_changed",
            order_id=str(order.id),
            from_state=previous.value,
            to_state=disposition.value,
        )
        return order
