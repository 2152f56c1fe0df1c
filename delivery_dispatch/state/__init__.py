"""State management modules."""

from delivery_dispatch.state.manager import StateManager
from delivery_dispatch.state.repository import Repository

__all__ = ["StateManager", "Repository"]
