"""Challenge service: listing, details, creation and participation."""

from uuid import UUID

from challenge_platform.config import Settings, get_settings
from challenge_platform.repositories.challenge_repository import ChallengeRepository
from challenge_platform.repositories.exceptions import ConcurrencyError
from challenge_platform.shared.utils.logging import get_logger

from .schemas import (
    ActionResponse,
    ChallengeDetail,
    ChallengeSummary,
    CreateChallengeRequest,
    CreatedChallengeResponse,
)
from .state_machine import (
    GuardViolation,
    ParticipationAction,
    ParticipationMutation,
    error_for,
    next_state,
)

logger = get_logger(__name__)

SUCCESS_MESSAGES: dict[ParticipationAction, str] = {
    ParticipationAction.PARTICIPATE: "You have successfully participated!",
    ParticipationAction.UNPARTICIPATE: "You have successfully unparticipated from this challenge!",
    ParticipationAction.COMPLETE: "You have successfully completed this challenge!",
}


class ChallengeService:
    """Runs user-facing challenge actions against an injected repository.

    Participation actions never read-modify-write: the state machine picks
    a mutation from a snapshot and the repository applies it conditionally.
    If the condition no longer holds, the snapshot is reloaded and the
    decision is made again.
    """

    def __init__(self, repository: ChallengeRepository, settings: Settings | None = None):
        self.repository = repository
        self.settings = settings or get_settings()

    async def list_challenges(
        self,
        page: int = 0,
        page_size: int | None = None,
    ) -> list[ChallengeSummary]:
        """List challenges newest first."""
        if page_size is None:
            page_size = self.settings.default_page_size
        records = await self.repository.list_challenges(page, page_size)
        return [ChallengeSummary.model_validate(record) for record in records]

    async def get_challenge(self, url_name: str) -> ChallengeDetail:
        """Get a challenge by slug. Counts as one view."""
        record = await self.repository.get_detail(url_name)
        return ChallengeDetail.model_validate(record)

    async def create_challenge(
        self,
        author_id: UUID,
        data: CreateChallengeRequest,
    ) -> CreatedChallengeResponse:
        """Create a challenge authored by ``author_id``."""
        challenge = await self.repository.create(
            url_name=data.url_name,
            name=data.name,
            description=data.description,
            author_id=author_id,
        )
        return CreatedChallengeResponse(
            text="Challenge created successfully!",
            url_name=challenge.url_name,
        )

    async def participate(self, url_name: str, user_id: UUID) -> ActionResponse:
        """Start or resume participating in a challenge."""
        return await self._run(url_name, user_id, ParticipationAction.PARTICIPATE)

    async def unparticipate(self, url_name: str, user_id: UUID) -> ActionResponse:
        """Pause an active participation. The record is kept."""
        return await self._run(url_name, user_id, ParticipationAction.UNPARTICIPATE)

    async def complete(self, url_name: str, user_id: UUID) -> ActionResponse:
        """Mark a challenge as completed by a participating user."""
        return await self._run(url_name, user_id, ParticipationAction.COMPLETE)

    async def _run(
        self,
        url_name: str,
        user_id: UUID,
        action: ParticipationAction,
    ) -> ActionResponse:
        await self._apply(url_name, user_id, action)
        return ActionResponse(text=SUCCESS_MESSAGES[action], url_name=url_name)

    async def _apply(
        self,
        url_name: str,
        user_id: UUID,
        action: ParticipationAction,
    ) -> ParticipationMutation:
        """Decide and apply ``action``, re-deciding after lost races.

        Raises:
            EntityNotFoundError: If the challenge does not exist
            ParticipationStateError: If a guard blocks the action
            ConcurrencyError: If every attempt lost its precondition
        """
        attempts = self.settings.participation_write_attempts

        for attempt in range(1, attempts + 1):
            snapshot = await self.repository.get_participation_snapshot(url_name)
            outcome = next_state(snapshot, action, user_id)

            if isinstance(outcome, GuardViolation):
                logger.info(
                    "participation_blocked",
                    url_name=url_name,
                    user_id=str(user_id),
                    action=action.value,
                    violation=outcome.value,
                )
                raise error_for(outcome)

            applied = await self.repository.apply_participation_change(
                snapshot.challenge_id, outcome, user_id
            )
            if applied:
                logger.info(
                    "participation_changed",
                    url_name=url_name,
                    user_id=str(user_id),
                    action=action.value,
                    mutation=outcome.value,
                )
                return outcome

            logger.info(
                "participation_write_conflict",
                url_name=url_name,
                user_id=str(user_id),
                mutation=outcome.value,
                attempt=attempt,
            )

        raise ConcurrencyError("Challenge", url_name, attempts)
