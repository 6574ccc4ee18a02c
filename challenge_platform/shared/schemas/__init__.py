"""Shared schemas module."""

from challenge_platform.shared.schemas.base import (
    BaseSchema,
    ErrorResponse,
    SuccessResponse,
)

__all__ = [
    "BaseSchema",
    "ErrorResponse",
    "SuccessResponse",
]
