"""Engine wiring: state, transports and services."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import redis.asyncio as redis

from delivery_dispatch.config import Settings, get_settings
from delivery_dispatch.services.assignment import DriverService
from delivery_dispatch.services.communications import (
    LoggingMailTransport,
    MailTransport,
    PushTransport,
)
from delivery_dispatch.services.lifecycle import OrderLifecycle
from delivery_dispatch.services.messaging import MessageDispatcher
from delivery_dispatch.services.pricing import OrderLedger
from delivery_dispatch.state.manager import StateManager
from delivery_dispatch.state.repository import Repository
from delivery_dispatch.utils.logging import get_logger

logger = get_logger(__name__)


class DispatchEngine:
    """Owns the state manager and the services built on it."""

    def __init__(
        self,
        state_manager: StateManager,
        mail_transport: MailTransport | None = None,
        push_transport: PushTransport | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.state = state_manager
        self.repository = Repository(state_manager)

        self.mail_transport = mail_transport or LoggingMailTransport(self.settings.mail_from)
        self.push_transport = push_transport

        self.dispatcher = MessageDispatcher(
            self.repository, self.mail_transport, self.push_transport
        )
        self.ledger = OrderLedger(self.repository)
        self.lifecycle = OrderLifecycle(
            self.repository,
            enforce_transitions=self.settings.enforce_disposition_transitions,
        )
        self.drivers = DriverService(self.repository, self.dispatcher)

    async def start(self) -> None:
        await self.state.connect()
        logger.info("engine_started", environment=self.settings.environment)

    async def close(self) -> None:
        await self.state.disconnect()
        logger.info("engine_stopped")


@asynccontextmanager
async def create_engine(
    redis_client: redis.Redis | None = None,
    mail_transport: MailTransport | None = None,
    push_transport: PushTransport | None = None,
    settings: Settings | None = None,
) -> AsyncGenerator[DispatchEngine, None]:
    """Start an engine for the duration of the block and close it afterwards."""
    settings = settings or get_settings()
    engine = DispatchEngine(
        StateManager(redis_url=settings.redis_url, redis_client=redis_client),
        mail_transport=mail_transport,
        push_transport=push_transport,
        settings=settings,
    )

    await engine.start()
    try:
        yield engine
    finally:
        await engine.close()
