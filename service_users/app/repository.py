"""
User repository contract and its cache-aside proxy.

``CachingUserRepository`` exposes the same operations as the store it
wraps. Reads try the cache first and fall back to the store on any cache
error, repopulating the cache afterwards. Writes go to the store and then
drop the cached list so the next read rebuilds it. Cache failures never
reach the caller; store failures always do.
"""

from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import List, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import RegistryException, DecodeError, NotFoundError
from .cache.base import Cache
from .models import User, UserList

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


USERS_CACHE_KEY = "users"


class UserRepository(ABC):
    """Create and list users."""

    @abstractmethod
    async def create(self, user: User) -> int:
        """Persist a user and return its generated identifier."""

    @abstractmethod
    async def list_all(self) -> List[User]:
        """Return every user."""


class CachingUserRepository(UserRepository):
    """Cache-aside proxy over another user repository."""

    def __init__(
        self,
        repository: UserRepository,
        cache: Cache,
        *,
        ttl: Optional[int] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.repository = repository
        self.cache = cache
        self.ttl = ttl
        self.metrics = metrics
        self.logger = get_logger("users.repository.caching")

    async def create(self, user: User) -> int:
        with self._timed("create"):
            user_id = await self.repository.create(user)

        try:
            await self.cache.delete(USERS_CACHE_KEY)
        except RegistryException as e:
            # Stale list stays readable until its TTL runs out
            self.logger.warning("Failed to invalidate users cache", key=USERS_CACHE_KEY, error=str(e))

        return user_id

    async def list_all(self) -> List[User]:
        try:
            users = await self.cache.get(USERS_CACHE_KEY, UserList)
        except RegistryException as e:
            self._record_miss(e)
        else:
            if self.metrics:
                self.metrics.increment_counter("users_cache_hits_total")
            return users

        with self._timed("list_all"):
            users = await self.repository.list_all()

        if not await self.cache.set(USERS_CACHE_KEY, users, ttl=self.ttl):
            self.logger.warning("Failed to populate users cache", key=USERS_CACHE_KEY)

        return users

    def _timed(self, operation: str):
        if self.metrics:
            return self.metrics.time_operation("users_store_duration_seconds", operation=operation)
        return nullcontext()

    def _record_miss(self, error: RegistryException):
        if isinstance(error, NotFoundError):
            reason = "not_found"
        elif isinstance(error, DecodeError):
            reason = "decode"
        else:
            reason = "io"

        self.logger.debug("Users cache miss, reading store", reason=reason, error=error.message)
        if self.metrics:
            self.metrics.increment_counter("users_cache_misses_total", reason=reason)
