"""Pydantic v2 schemas for the challenge system."""

from datetime import datetime

from pydantic import Field

from challenge_platform.shared.schemas.base import BaseSchema, SuccessResponse

URL_NAME_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class CreateChallengeRequest(BaseSchema):
    """Request to create a new challenge."""

    name: str = Field(min_length=1, max_length=200)
    url_name: str = Field(min_length=1, max_length=100, pattern=URL_NAME_PATTERN)
    description: str = ""


class ChallengeSummary(BaseSchema):
    """Listing row. Participant identities are never exposed here."""

    name: str
    url_name: str
    description: str
    author_name: str
    participant_count: int
    completed_count: int
    date_created: datetime
    views: int


class ParticipationEntry(BaseSchema):
    """A participant and whether they are currently active."""

    user_name: str
    active: bool


class ChallengeDetail(BaseSchema):
    """Challenge details with names resolved."""

    name: str
    url_name: str
    description: str
    author_name: str
    date_created: datetime
    views: int
    participations: list[ParticipationEntry] = Field(default_factory=list)
    completed_by: list[str] = Field(default_factory=list)


class CreatedChallengeResponse(SuccessResponse):
    """Confirmation of a created challenge."""

    url_name: str


class ActionResponse(SuccessResponse):
    """Acknowledgement of a participation action."""

    url_name: str
