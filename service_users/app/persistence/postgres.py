"""
PostgreSQL persistence layer for Users Service.
"""

from typing import List, Optional

import asyncpg

from shared.logging import get_logger
from shared.errors import RegistryException, BackendIOError, ConstraintViolationError
from ..models import User
from .base import UserStore


class PostgreSQLUserStore(UserStore):
    """PostgreSQL persistence layer for users."""

    TABLE_NAME = "users"

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: float = 30,
    ):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self.command_timeout = command_timeout
        self.logger = get_logger("users.persistence.postgres")
        self.pool: Optional[asyncpg.Pool] = None

    async def start(self):
        """Start the persistence layer."""
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                command_timeout=self.command_timeout
            )

            await self._create_tables()

            self.logger.info("PostgreSQL persistence started")

        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            self.logger.error("Failed to start PostgreSQL persistence", error=str(e))
            if self.pool is not None:
                await self.pool.close()
                self.pool = None
            raise RegistryException("POSTGRES_START_FAILED", str(e))

    async def stop(self):
        """Stop the persistence layer."""
        if self.pool:
            await self.pool.close()
            self.pool = None
            self.logger.info("PostgreSQL persistence stopped")

    async def _create_tables(self):
        """Create the users table if it does not exist."""
        async with self._pool().acquire() as conn:
            await conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE_NAME} (
                    id SERIAL PRIMARY KEY,
                    name VARCHAR(255),
                    password VARCHAR(255),
                    email VARCHAR(255) UNIQUE,
                    age INTEGER
                );
            """)

    async def create(self, user: User) -> int:
        """Insert a user and return its generated id."""
        try:
            async with self._pool().acquire() as conn:
                user_id = await conn.fetchval(
                    f"""
                    INSERT INTO {self.TABLE_NAME} (name, password, email, age)
                    VALUES ($1, $2, $3, $4)
                    RETURNING id
                    """,
                    user.name, user.password, user.email, user.age
                )
        except asyncpg.UniqueViolationError as e:
            self.logger.warning("Duplicate user email", email=user.email)
            raise ConstraintViolationError(
                f"failed to insert user: email {user.email} already registered",
                {"field": "email", "constraint": getattr(e, "constraint_name", None)}
            ) from e
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            self.logger.error("Error inserting user", error=str(e))
            raise BackendIOError("postgres", f"failed to insert user: {e}") from e

        self.logger.info("User inserted", user_id=user_id)
        return user_id

    async def list_all(self) -> List[User]:
        """Load all users in insertion order."""
        try:
            async with self._pool().acquire() as conn:
                rows = await conn.fetch(
                    f"SELECT id, name, password, email, age FROM {self.TABLE_NAME} ORDER BY id"
                )
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            self.logger.error("Error loading users", error=str(e))
            raise BackendIOError("postgres", f"failed to get all users: {e}") from e

        return [self._row_to_user(row) for row in rows]

    def _row_to_user(self, row) -> User:
        """Convert database row to User object."""
        return User(
            id=row['id'],
            name=row['name'],
            password=row['password'],
            email=row['email'],
            age=row['age']
        )

    def _pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise BackendIOError("postgres", "store not started")
        return self.pool

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            async with self._pool().acquire() as conn:
                await conn.fetchval("SELECT 1")
                return True
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, BackendIOError):
            return False
