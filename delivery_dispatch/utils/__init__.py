"""Utility modules."""

from delivery_dispatch.utils.logging import setup_logging

__all__ = ["setup_logging"]
