"""Database infrastructure package."""

from challenge_platform.infrastructure.database.models import (
    Base,
    Challenge,
    ChallengeCompletion,
    ChallengeParticipation,
    User,
)
from challenge_platform.infrastructure.database.session import (
    close_db,
    create_schema,
    get_db,
    get_db_session,
    init_db,
)

__all__ = [
    "Base",
    "Challenge",
    "ChallengeCompletion",
    "ChallengeParticipation",
    "User",
    "close_db",
    "create_schema",
    "get_db",
    "get_db_session",
    "init_db",
]
