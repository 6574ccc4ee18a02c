"""Challenge participation state machine.

States per (challenge, user): none → participating ⇄ paused, and
participating → completed. Completed is terminal: no action leaves it.

Everything here is pure. Callers pass a snapshot of the challenge's
participation records and get back either the mutation to apply or the
guard that blocks the action.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from uuid import UUID


class ParticipationState(str, Enum):
    """Where a user stands with respect to one challenge."""

    NONE = "none"
    PARTICIPATING = "participating"
    PAUSED = "paused"
    COMPLETED = "completed"


class ParticipationAction(str, Enum):
    """User-facing participation actions."""

    PARTICIPATE = "participate"
    UNPARTICIPATE = "unparticipate"
    COMPLETE = "complete"


class ParticipationMutation(str, Enum):
    """Storage-level changes an allowed action maps to."""

    ADD = "add"            # new active record
    RENEW = "renew"        # paused record -> active
    PAUSE = "pause"        # active record -> paused
    COMPLETE = "complete"  # drop record, append to completed_by


class GuardViolation(str, Enum):
    """Guards that can block an action."""

    ALREADY_COMPLETED = "already_completed"
    ALREADY_ACTIVE = "already_active"
    NOT_PARTICIPATING = "not_participating"


@dataclass(frozen=True)
class ParticipationRecord:
    """One entry of a challenge's participation sequence."""

    user_id: UUID
    active: bool = True


@dataclass(frozen=True)
class ParticipationSnapshot:
    """Participation state of a single challenge as read from storage."""

    challenge_id: UUID
    url_name: str
    participations: tuple[ParticipationRecord, ...] = ()
    completed_by: tuple[UUID, ...] = ()

    def record_for(self, user_id: UUID) -> ParticipationRecord | None:
        for record in self.participations:
            if record.user_id == user_id:
                return record
        return None

    def has_completed(self, user_id: UUID) -> bool:
        return user_id in self.completed_by


Outcome = ParticipationMutation | GuardViolation

TRANSITIONS: dict[ParticipationAction, dict[ParticipationState, Outcome]] = {
    ParticipationAction.PARTICIPATE: {
        ParticipationState.NONE: ParticipationMutation.ADD,
        ParticipationState.PAUSED: ParticipationMutation.RENEW,
        ParticipationState.PARTICIPATING: GuardViolation.ALREADY_ACTIVE,
        ParticipationState.COMPLETED: GuardViolation.ALREADY_COMPLETED,
    },
    ParticipationAction.UNPARTICIPATE: {
        ParticipationState.PARTICIPATING: ParticipationMutation.PAUSE,
        ParticipationState.NONE: GuardViolation.NOT_PARTICIPATING,
        ParticipationState.PAUSED: GuardViolation.NOT_PARTICIPATING,
        ParticipationState.COMPLETED: GuardViolation.ALREADY_COMPLETED,
    },
    ParticipationAction.COMPLETE: {
        ParticipationState.PARTICIPATING: ParticipationMutation.COMPLETE,
        ParticipationState.NONE: GuardViolation.NOT_PARTICIPATING,
        ParticipationState.PAUSED: GuardViolation.NOT_PARTICIPATING,
        ParticipationState.COMPLETED: GuardViolation.ALREADY_COMPLETED,
    },
}


# ===========================================
# ERRORS
# ===========================================


class ParticipationStateError(Exception):
    """Raised when a participation action is blocked by a guard."""

    violation: GuardViolation
    default_message = "This action is not allowed in the current participation state."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AlreadyCompletedError(ParticipationStateError):
    violation = GuardViolation.ALREADY_COMPLETED
    default_message = "You have already completed this challenge!"


class AlreadyActiveError(ParticipationStateError):
    violation = GuardViolation.ALREADY_ACTIVE
    default_message = "You are already participating in this challenge."


class NotParticipatingError(ParticipationStateError):
    violation = GuardViolation.NOT_PARTICIPATING
    default_message = "You must participate in this challenge first!"


_ERRORS: dict[GuardViolation, type[ParticipationStateError]] = {
    GuardViolation.ALREADY_COMPLETED: AlreadyCompletedError,
    GuardViolation.ALREADY_ACTIVE: AlreadyActiveError,
    GuardViolation.NOT_PARTICIPATING: NotParticipatingError,
}


def error_for(violation: GuardViolation) -> ParticipationStateError:
    """Build the exception matching a guard violation."""
    return _ERRORS[violation]()


# ===========================================
# TRANSITIONS
# ===========================================


def state_of(snapshot: ParticipationSnapshot, user_id: UUID) -> ParticipationState:
    """Derive the user's state. Completion wins over any participation record."""
    if snapshot.has_completed(user_id):
        return ParticipationState.COMPLETED
    record = snapshot.record_for(user_id)
    if record is None:
        return ParticipationState.NONE
    return ParticipationState.PARTICIPATING if record.active else ParticipationState.PAUSED


def next_state(
    snapshot: ParticipationSnapshot,
    action: ParticipationAction,
    user_id: UUID,
) -> Outcome:
    """Return the mutation ``action`` maps to, or the guard that blocks it."""
    return TRANSITIONS[action][state_of(snapshot, user_id)]


def validate_action(
    snapshot: ParticipationSnapshot,
    action: ParticipationAction,
    user_id: UUID,
) -> ParticipationMutation:
    """Like :func:`next_state`, raising ParticipationStateError on a guard."""
    outcome = next_state(snapshot, action, user_id)
    if isinstance(outcome, GuardViolation):
        raise error_for(outcome)
    return outcome


def apply_mutation(
    snapshot: ParticipationSnapshot,
    mutation: ParticipationMutation,
    user_id: UUID,
) -> ParticipationSnapshot:
    """Return the snapshot after ``mutation`` for ``user_id``.

    The mutation is assumed to have been approved by :func:`next_state`.
    """
    records = snapshot.participations

    if mutation is ParticipationMutation.ADD:
        return replace(
            snapshot,
            participations=(*records, ParticipationRecord(user_id=user_id, active=True)),
        )

    if mutation in (ParticipationMutation.RENEW, ParticipationMutation.PAUSE):
        active = mutation is ParticipationMutation.RENEW
        return replace(
            snapshot,
            participations=tuple(
                ParticipationRecord(user_id=r.user_id, active=active) if r.user_id == user_id else r
                for r in records
            ),
        )

    return replace(
        snapshot,
        participations=tuple(r for r in records if r.user_id != user_id),
        completed_by=(*snapshot.completed_by, user_id),
    )
