"""Route group exports."""

from . import health, rates, settings

__all__ = ["health", "rates", "settings"]
