"""
Base repository class for database access.

Provides a common abstraction layer for all repositories, encapsulating
Supabase client access and providing shared utilities for data operations.
"""

import asyncio
from datetime import datetime
from typing import Any, TypeVar, Generic
from supabase import Client


T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for database operations:
    - Supabase client access via self._db
    - Generic type parameter for model type hints

    Subclasses should implement domain-specific data access methods
    and handle dict-to-Pydantic model mapping internally.

    Example:
        class UserRepository(BaseRepository[CanonicalUser]):
            async def get_by_id(self, user_id: str) -> Optional[CanonicalUser]:
                result = await self._execute(
                    self._db.table("users").select("*").eq("id", user_id)
                )
                if not result.data:
                    return None
                return CanonicalUser(**result.data[0])
    """

    def __init__(self, db: Client) -> None:
        """
        Initialize the repository with a Supabase client.

        Args:
            db: Supabase client instance for database operations.
        """
        self._db = db

    async def _execute(self, query: Any) -> Any:
        """
        Execute a query builder off the event loop.

        The Supabase client is synchronous; running it in a worker thread
        keeps concurrent requests (and concurrent writes within one
        request) from queueing behind each other.
        """
        return await asyncio.to_thread(query.execute)

    @staticmethod
    def _first(result: Any) -> dict[str, Any] | None:
        """Return the first row of a query result, or None when empty."""
        if not result.data:
            return None
        return result.data[0]

    @staticmethod
    def _parse_timestamp(value: Any) -> datetime:
        """Parse a Postgres timestamp (ISO string) into a datetime."""
        if isinstance(value, datetime):
            return value
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
