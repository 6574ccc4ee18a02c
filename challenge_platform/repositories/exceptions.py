"""Repository layer exceptions.

Provides a typed exception hierarchy for repository operations,
enabling precise error handling at the service and HTTP layers.
"""

from typing import Any


class RepositoryError(Exception):
    """Base exception for all repository errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class EntityNotFoundError(RepositoryError):
    """Raised when an entity is not found in the database."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str | None = None,
        **lookup_params: Any,
    ) -> None:
        details = {"entity_type": entity_type}
        if entity_id:
            details["entity_id"] = entity_id
        details.update(lookup_params)

        message = f"{entity_type} not found"
        if entity_id:
            message = f"{entity_type} '{entity_id}' not found"

        super().__init__(message, details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityError(RepositoryError):
    """Raised when attempting to create a duplicate entity."""

    def __init__(
        self,
        entity_type: str,
        field: str,
        value: str,
    ) -> None:
        message = f"{entity_type} with {field}='{value}' already exists"
        details = {
            "entity_type": entity_type,
            "field": field,
            "value": value,
        }
        super().__init__(message, details)
        self.entity_type = entity_type
        self.field = field
        self.value = value


class ValidationError(RepositoryError):
    """Raised when input to a repository operation is invalid."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        errors: list[str] | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if field:
            details["field"] = field
        if errors:
            details["errors"] = errors

        super().__init__(message, details)
        self.field = field
        self.errors = errors or []


class ConcurrencyError(RepositoryError):
    """Raised when a conditional write keeps losing to concurrent writers."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        attempts: int,
    ) -> None:
        message = (
            f"Concurrent modification of {entity_type} '{entity_id}' "
            f"could not be resolved after {attempts} attempts"
        )
        details = {
            "entity_type": entity_type,
            "entity_id": entity_id,
            "attempts": attempts,
        }
        super().__init__(message, details)
        self.attempts = attempts


class StorageError(RepositoryError):
    """Raised when the storage engine fails.

    The message is safe to log; the original error is kept for debugging
    but never exposed to API callers.
    """

    def __init__(self, operation: str, original_error: Exception | None = None) -> None:
        details: dict[str, Any] = {"operation": operation}
        if original_error:
            details["error_type"] = type(original_error).__name__

        super().__init__(f"Storage operation '{operation}' failed", details)
        self.operation = operation
        self.original_error = original_error


__all__ = [
    "RepositoryError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "ValidationError",
    "ConcurrencyError",
    "StorageError",
]
