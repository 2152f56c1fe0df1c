"""Redis document store backing the entity repository."""

import json
from typing import Any, Awaitable, Callable

import redis.asyncio as redis

from delivery_dispatch.config import get_settings
from delivery_dispatch.utils.logging import get_logger

logger = get_logger(__name__)

Mutation = Callable[[dict[str, Any]], Awaitable[dict[str, Any] | None]]


class StateManager:
    """
    Stores JSON documents under string keys.

    A client can be injected (tests pass an in-memory one); otherwise a
    connection to ``redis_url`` is opened on first use.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        redis_client: redis.Redis | None = None,
    ) -> None:
        self.redis_url = redis_url or get_settings().redis_url
        self.redis_client: redis.Redis | None = redis_client

    async def connect(self) -> None:
        """Open the Redis connection unless a client is already attached."""
        if self.redis_client is not None:
            return

        self.redis_client = await redis.from_url(
            self.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
        logger.info("redis_connected", url=self.redis_url)

    async def disconnect(self) -> None:
        if self.redis_client is None:
            return

        await self.redis_client.aclose()
        self.redis_client = None
        logger.info("redis_disconnected")

    async def client(self) -> redis.Redis:
        """Return the live client, connecting first if needed."""
        await self.connect()
        return self.redis_client

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store ``value`` at ``key``, expiring after ``ttl`` seconds if given."""
        conn = await self.client()
        await conn.set(key, self._encode(value), ex=ttl)
        logger.debug("state_set", key=key, ttl=ttl)

    async def get(self, key: str) -> Any:
        conn = await self.client()
        return self._decode(await conn.get(key))

    async def get_many(self, keys: list[str]) -> list[Any]:
        """Fetch several keys in one MGET, in the order given."""
        if not keys:
            return []

        conn = await self.client()
        return [self._decode(raw) for raw in await conn.mget(keys)]

    async def transaction(
        self,
        sets: dict[str, Any] | None = None,
        deletes: list[str] | None = None,
    ) -> None:
        """Apply several writes and deletes as one MULTI/EXEC block."""
        sets = sets or {}
        deletes = deletes or []

        conn = await self.client()
        async with conn.pipeline(transaction=True) as pipe:
            for key, value in sets.items():
                pipe.set(key, self._encode(value))
            if deletes:
                pipe.delete(*deletes)
            await pipe.execute()

        logger.debug("state_transaction", set_keys=list(sets), deleted_keys=deletes)

    async def watch_and_set(self, keys: list[str], mutate: Mutation) -> bool:
        """
        Optimistic compare-and-set over several keys.

        The keys are WATCHed and read, then ``mutate`` receives their current
        values and returns the values to write (or ``None`` to write nothing).
        The writes are applied in one MULTI/EXEC block; if any watched key
        changed in between, Redis aborts the block and
        ``redis.exceptions.WatchError`` is raised.

        Returns True if anything was written.
        """
        conn = await self.client()
        async with conn.pipeline(transaction=True) as pipe:
            await pipe.watch(*keys)
            current = {key: self._decode(await pipe.get(key)) for key in keys}

            updates = await mutate(current)
            if not updates:
                return False

            pipe.multi()
            for key, value in updates.items():
                pipe.set(key, self._encode(value))
            await pipe.execute()

        logger.debug("state_compare_and_set", keys=keys)
        return True

    async def flush(self) -> None:
        """Drop every key in the current database."""
        conn = await self.client()
        await conn.flushdb()
        logger.info("state_flushed")

    @staticmethod
    def _encode(value: Any) -> Any:
        return json.dumps(value) if isinstance(value, (dict, list)) else value

    @staticmethod
    def _decode(raw: Any) -> Any:
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return raw


_state_manager: StateManager | None = None


async def get_state_manager() -> StateManager:
    """Return the process-wide state manager, connecting it on first call."""
    global _state_manager
    if _state_manager is None:
        _state_manager = StateManager()
    await _state_manager.connect()
    return _state_manager
