"""
Persistence capability interface for Users Service.
"""

from abc import abstractmethod

from ..repository import UserRepository


class UserStore(UserRepository):
    """Durable source of truth for user records.

    ``create`` raises ``ConstraintViolationError`` for a duplicate email and
    ``BackendIOError`` for transport failures; ``list_all`` raises
    ``BackendIOError``.
    """

    @abstractmethod
    async def start(self):
        """Open connections and ensure the schema exists."""

    @abstractmethod
    async def stop(self):
        """Release connections."""

    async def health_check(self) -> bool:
        return True
