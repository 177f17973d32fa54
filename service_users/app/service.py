"""
User registration service.
"""

from typing import List, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import ConstraintViolationError, ValidationError
from .models import User
from .repository import UserRepository

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


MIN_USER_AGE = 18


class UserService:
    """Applies registration rules before delegating to a repository.

    Only the age rule is checked here. Email uniqueness is left to the
    store and surfaces as a ``ConstraintViolationError``.
    """

    def __init__(
        self,
        repository: UserRepository,
        *,
        min_age: int = MIN_USER_AGE,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.repository = repository
        self.min_age = min_age
        self.metrics = metrics
        self.logger = get_logger("users.service")

    async def create(self, user: User) -> int:
        if user.age < 0 or user.age < self.min_age:
            self.logger.info("Registration rejected", reason="age", age=user.age)
            if self.metrics:
                self.metrics.increment_counter("users_rejected_total", reason="age")
            raise ValidationError(
                f"user age is less than {self.min_age}",
                {"field": "age", "min_age": self.min_age}
            )

        try:
            user_id = await self.repository.create(user)
        except ConstraintViolationError:
            if self.metrics:
                self.metrics.increment_counter("users_rejected_total", reason="duplicate_email")
            raise

        if self.metrics:
            self.metrics.increment_counter("users_created_total")
        return user_id

    async def list_all(self) -> List[User]:
        return await self.repository.list_all()
