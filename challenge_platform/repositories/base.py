"""Base repository abstract class.

Provides the session handling, pagination checks and storage error
translation shared by concrete repositories.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from challenge_platform.repositories.exceptions import StorageError, ValidationError
from challenge_platform.shared.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# Maximum allowed page size to prevent oversized reads
MAX_PAGE_SIZE = 100


def validate_pagination(
    page: int,
    page_size: int,
    max_page_size: int = MAX_PAGE_SIZE,
) -> tuple[int, int]:
    """Validate page-numbered pagination and turn it into limit/offset.

    Page ``0`` and page ``1`` both address the first page. Page sizes above
    ``max_page_size`` are capped rather than rejected.

    Args:
        page: Requested page number
        page_size: Requested number of items per page
        max_page_size: Upper bound for ``page_size``

    Returns:
        Validated (limit, offset) tuple

    Raises:
        ValidationError: If parameters are invalid
    """
    if page_size <= 0:
        raise ValidationError("Page size must be positive", field="page_size")
    if page < 0:
        raise ValidationError("Page must be non-negative", field="page")
    limit = min(page_size, max_page_size)
    offset = (page - 1) * limit if page > 0 else 0
    return limit, offset


def _sanitize_error_for_logging(error: Exception) -> str:
    """Describe a storage error without connection strings or SQL."""
    error_type = type(error).__name__

    safe_messages = {
        "OperationalError": "Database operational error",
        "IntegrityError": "Data integrity constraint violation",
        "ProgrammingError": "Query execution error",
        "DBAPIError": "Database driver error",
        "TimeoutError": "Operation timed out",
    }

    return safe_messages.get(error_type, f"Error of type {error_type}")


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository bound to one async session.

    Type Parameters:
        T: The aggregate root type this repository manages
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: Async SQLAlchemy session for database operations
        """
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Return the SQLAlchemy model class for this repository."""

    @asynccontextmanager
    async def storage_operation(self, operation: str, **context: Any) -> AsyncGenerator[None, None]:
        """Translate engine failures inside the block into StorageError.

        The session is rolled back and the failure is logged with
        ``context`` before the StorageError propagates.
        """
        try:
            yield
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                "storage_error",
                operation=operation,
                entity=self.model_class.__name__,
                error=_sanitize_error_for_logging(e),
                **context,
            )
            raise StorageError(operation, original_error=e) from e


__all__ = [
    "BaseRepository",
    "MAX_PAGE_SIZE",
    "validate_pagination",
]
