"""Distance based shipping rate calculation service."""

__version__ = "0.1.0"
