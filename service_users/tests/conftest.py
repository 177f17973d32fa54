"""
Shared fixtures and in-memory fakes for Users Service tests.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from shared.config import get_config
from shared.errors import BackendIOError, ConstraintViolationError, NotFoundError
from service_users.app.cache.base import Cache
from service_users.app.models import User
from service_users.app.persistence.base import UserStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeUserStore(UserStore):
    """In-memory user store enforcing unique emails."""

    def __init__(self):
        self.users: List[User] = []
        self.available = True
        self.started = False
        self.create_calls = 0
        self.list_calls = 0

    async def start(self):
        self.started = True

    async def stop(self):
        self.started = False

    async def create(self, user: User) -> int:
        self.create_calls += 1
        if not self.available:
            raise BackendIOError("postgres", "connection refused")
        if any(existing.email == user.email for existing in self.users):
            raise ConstraintViolationError(f"failed to insert user: email {user.email} already registered")

        stored = user.model_copy(update={"id": len(self.users) + 1})
        self.users.append(stored)
        return stored.id

    async def list_all(self) -> List[User]:
        self.list_calls += 1
        if not self.available:
            raise BackendIOError("postgres", "connection refused")
        return [user.model_copy() for user in self.users]

    async def health_check(self) -> bool:
        return self.available


class FakeCache(Cache):
    """In-memory byte cache with TTL driven by a fake clock."""

    def __init__(self, clock: Optional[FakeClock] = None, default_ttl: int = 300):
        super().__init__(default_ttl)
        self.clock = clock or FakeClock()
        self.entries: Dict[str, Tuple[bytes, float]] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.fail_deletes = False
        self.set_calls = 0
        self.delete_calls = 0

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        self.set_calls += 1
        if self.fail_writes:
            return False
        self.entries[key] = (self.encode(value), self.clock() + self._ttl(ttl))
        return True

    async def get(self, key: str, type_: Any = None) -> Any:
        if self.fail_reads:
            raise BackendIOError("redis", "connection reset")
        entry = self.entries.get(key)
        if entry is None or entry[1] <= self.clock():
            self.entries.pop(key, None)
            raise NotFoundError(f"key {key} not found")
        return self.decode(key, entry[0], type_)

    async def delete(self, key: str) -> None:
        self.delete_calls += 1
        if self.fail_deletes:
            raise BackendIOError("redis", "connection reset")
        self.entries.pop(key, None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeUserStore()


@pytest.fixture
def cache(clock):
    return FakeCache(clock)


@pytest.fixture
def config():
    return get_config("users", 8080)


@pytest.fixture
def make_user():
    """Factory for user records awaiting an id."""
    def _make_user(name="Al", password="x", email="a@x.com", age=21) -> User:
        return User(name=name, password=password, email=email, age=age)
    return _make_user
