"""
Users service for the User Registry.
"""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import RegistryException, ConstraintViolationError, ValidationError

from .cache import Cache, RedisCache
from .models import UserCreateRequest, UserList
from .persistence import UserStore, PostgreSQLUserStore
from .repository import CachingUserRepository
from .service import UserService

SERVICE_NAME = "users"
DEFAULT_PORT = 8080


class UsersService(BaseService):
    """Users service implementation.

    Wires store, cache, caching repository and validation service. Store and
    cache default to PostgreSQL and Redis built from configuration.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        store: Optional[UserStore] = None,
        cache: Optional[Cache] = None,
    ):
        super().__init__(SERVICE_NAME, DEFAULT_PORT, config=config)

        self.store = store if store is not None else PostgreSQLUserStore(
            self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool_size,
            max_size=self.config.postgres_max_pool_size,
            command_timeout=self.config.postgres_command_timeout,
        )
        self.cache = cache if cache is not None else RedisCache(
            self.config.redis_url,
            default_ttl=self.config.cache_ttl_seconds,
        )
        self.repository = CachingUserRepository(self.store, self.cache, metrics=self.metrics)
        self.user_service = UserService(
            self.repository,
            min_age=self.config.min_user_age,
            metrics=self.metrics,
        )

        self._setup_users_routes()

    def _setup_users_routes(self):
        """Set up users-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "User Registry - Users Service",
                "version": "1.0.0",
                "capabilities": ["registration", "caching", "persistence"]
            }

        @self.app.post("/user")
        async def create_user(request: Request):
            """Register a user; responds with the new id as plain text."""
            body = await request.body()
            try:
                payload = UserCreateRequest.model_validate_json(body)
            except PydanticValidationError as e:
                self.logger.warning("Failed to decode request body", error=str(e))
                return PlainTextResponse(str(e), status_code=400)

            try:
                user_id = await self.user_service.create(payload.to_user())
            except RegistryException as e:
                self._log_create_failure(e)
                return PlainTextResponse(e.message, status_code=500)

            self.logger.info("User created", user_id=user_id)
            return PlainTextResponse(str(user_id), status_code=201)

        @self.app.get("/users")
        async def list_users():
            """List all users as a JSON array."""
            try:
                users = await self.user_service.list_all()
            except RegistryException as e:
                self.logger.error("Failed to list users", code=e.code, error=e.message)
                self.metrics.record_error(e.code)
                return PlainTextResponse(e.message, status_code=500)

            self.logger.info("Users listed", count=len(users))
            return JSONResponse(content=UserList.dump_python(users, mode="json"))

    def _log_create_failure(self, error: RegistryException):
        if isinstance(error, (ValidationError, ConstraintViolationError)):
            self.logger.info("User rejected", code=error.code, error=error.message)
        else:
            self.logger.error("Failed to create user", code=error.code, error=error.message)
            self.metrics.record_error(error.code)

    async def _check_dependencies(self):
        """Check users service dependencies."""
        dependencies = {}
        dependencies["redis"] = "ok" if await self.cache.health_check() else "error"
        dependencies["postgres"] = "ok" if await self.store.health_check() else "error"
        return dependencies

    async def start(self):
        """Start users service components."""
        await self.store.start()
        try:
            await self.cache.start()
        except RegistryException:
            await self.store.stop()
            raise

        self.logger.info("Users service started")

    async def stop(self):
        """Stop users service components."""
        await self.store.stop()
        await self.cache.stop()

        self.logger.info("Users service stopped")


def create_app(**kwargs):
    """Create users service application."""
    service = UsersService(**kwargs)
    return service.app


def main():
    UsersService().run()


if __name__ == "__main__":
    main()
