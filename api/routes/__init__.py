"""API routes package"""

from . import health, preferences

__all__ = ["health", "preferences"]
