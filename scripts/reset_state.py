"""Reset all state in Redis (useful for testing)."""

import asyncio

from delivery_dispatch.config import get_settings
from delivery_dispatch.state.manager import get_state_manager
from delivery_dispatch.utils.logging import setup_logging


async def reset_all_state() -> None:
    """Clear all data from Redis."""
    settings = get_settings()
    setup_logging()

    print(f"\n⚠️  WARNING: This will delete ALL data from {settings.redis_url}!")
    response = input("Are you sure? (yes/no): ")

    if response.lower() != "yes":
        print("Cancelled.")
        return

    print("\nResetting state...")

    state_manager = await get_state_manager()
    await state_manager.flush()
    await state_manager.disconnect()

    print("✓ All state cleared from Redis\n")


if __name__ == "__main__":
    asyncio.run(reset_all_state())
