"""
Cache package for Users Service.

Provides the ``Cache`` capability interface and a Redis-backed
implementation that stores the serialized user list with a TTL.
"""

from .base import Cache, DEFAULT_TTL_SECONDS
from .redis_cache import RedisCache

__all__ = ["Cache", "DEFAULT_TTL_SECONDS", "RedisCache"]
