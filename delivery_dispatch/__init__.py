"""Driver assignment and notification dispatch engine for a food-delivery marketplace."""

__version__ = "0.1.0"
