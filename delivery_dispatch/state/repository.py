"""Entity persistence on top of the state manager."""

from typing import Any, Awaitable, Callable, TypeVar
from uuid import UUID

from delivery_dispatch.models.base import Entity
from delivery_dispatch.state.manager import StateManager
from delivery_dispatch.utils.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E", bound=Entity)


class Repository:
    """Loads, saves and resolves references between entities."""

    def __init__(self, state_manager: StateManager):
        self.state = state_manager

    @staticmethod
    def key(kind: str | type[Entity], entity_id: UUID | str) -> str:
        """Generate the Redis key for an entity."""
        if not isinstance(kind, str):
            kind = kind.kind
        return f"{kind}:{entity_id}"

    def key_for(self, entity: Entity) -> str:
        return self.key(entity.kind, entity.id)

    async def save(self, entity: E) -> E:
        """Persist an entity, replacing any previous version."""
        await self.state.set(self.key_for(entity), entity.model_dump(mode="json"))
        return entity

    async def load(self, model: type[E], entity_id: UUID | str | None) -> E | None:
        """Load an entity by id; ``None`` if it does not exist."""
        if entity_id is None:
            return None

        data = await self.state.get(self.key(model, entity_id))
        if not data:
            return None
        return model.model_validate(data)

    async def load_many(self, model: type[E], entity_ids: list[UUID]) -> list[E | None]:
        """Load several entities, keeping order; missing ones are ``None``."""
        keys = [self.key(model, entity_id) for entity_id in entity_ids]
        return [
            model.model_validate(data) if data else None
            for data in await self.state.get_many(keys)
        ]

    async def commit(
        self,
        save: list[Entity] | None = None,
        remove: list[Entity] | None = None,
    ) -> None:
        """Save and remove several entities atomically."""
        await self.state.transaction(
            sets={self.key_for(entity): entity.model_dump(mode="json") for entity in save or []},
            deletes=[self.key_for(entity) for entity in remove or []],
        )

    async def populate(self, entity: Entity, relations: list[str]) -> dict[str, Any]:
        """
        Resolve reference fields into entities.

        Returns a mapping of relation name to the referenced entity (or
        ``None``), or to a list of entities for list-valued references.
        The entity itself is not modified.
        """
        resolved: dict[str, Any] = {}
        for name in relations:
            if name not in entity.relations:
                raise ValueError(f"{entity.kind} has no relation '{name}'")

            model = Entity.registry[entity.relations[name]]
            value = getattr(entity, name)

            if isinstance(value, list):
                resolved[name] = await self.load_many(model, value)
            else:
                resolved[name] = await self.load(model, value)

        return resolved

    async def compare_and_set(
        self,
        entities: list[Entity],
        mutate: Callable[..., Awaitable[list[Entity] | None]],
    ) -> list[Entity] | None:
        """
        Re-read ``entities`` under optimistic locking and write back the result of ``mutate``.

        ``mutate`` is called with the freshly loaded entities, in the same
        order, and returns the entities to save or ``None`` to abort. Raises
        ``redis.exceptions.WatchError`` if any of the records changed
        concurrently. Returns the saved entities, or ``None`` if aborted.
        """
        keys = [self.key_for(entity) for entity in entities]
        models = {self.key_for(entity): type(entity) for entity in entities}
        saved: list[Entity] | None = None

        async def apply(current: dict[str, Any]) -> dict[str, Any] | None:
            nonlocal saved
            fresh = [
                models[key].model_validate(current[key]) if current[key] else None
                for key in keys
            ]
            saved = await mutate(*fresh)
            if saved is None:
                return None
            return {self.key_for(entity): entity.model_dump(mode="json") for entity in saved}

        written = await self.state.watch_and_set(keys, apply)
        if not written:
            return None

        logger.debug("entities_swapped", keys=keys)
        return saved
