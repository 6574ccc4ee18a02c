"""Typed read models returned by the challenge repository.

These are projections of the challenge aggregate: they never carry more
than the caller is allowed to see (the listing, for instance, only knows
participant counts).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class ChallengeSummaryRecord:
    """One row of the paginated challenge listing."""

    name: str
    url_name: str
    description: str
    author_name: str
    participant_count: int
    completed_count: int
    date_created: datetime
    views: int


@dataclass
class ParticipationView:
    """A participation entry with the participant's display name resolved."""

    user_name: str
    active: bool


@dataclass
class ChallengeDetailRecord:
    """A single challenge with author and participant names resolved.

    Attributes:
        participations: Entries in the order users first joined
        completed_by: Display names in completion order
    """

    name: str
    url_name: str
    description: str
    author_name: str
    date_created: datetime
    views: int
    participations: list[ParticipationView] = field(default_factory=list)
    completed_by: list[str] = field(default_factory=list)

