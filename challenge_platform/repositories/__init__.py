"""Repository layer for database operations.

This module provides the repository pattern implementation for
the challenge aggregate stored in PostgreSQL.
"""

from challenge_platform.repositories.base import BaseRepository, validate_pagination
from challenge_platform.repositories.challenge_repository import ChallengeRepository
from challenge_platform.repositories.exceptions import (
    ConcurrencyError,
    DuplicateEntityError,
    EntityNotFoundError,
    RepositoryError,
    StorageError,
    ValidationError,
)

__all__ = [
    # Base
    "BaseRepository",
    "validate_pagination",
    # Exceptions
    "RepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "ValidationError",
    "ConcurrencyError",
    "StorageError",
    # Repositories
    "ChallengeRepository",
]
