"""Challenge repository for PostgreSQL operations.

Owns the challenge aggregate: the ``challenges`` row plus its
participation and completion rows. Participation changes are only exposed
as single conditional statements, so a concurrent writer makes the
precondition fail instead of corrupting the aggregate.
"""

from uuid import UUID

from sqlalchemy import Insert, Update, cast, delete, func, insert, literal, select, true, update
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from challenge_platform.challenges.state_machine import (
    ParticipationMutation,
    ParticipationRecord,
    ParticipationSnapshot,
)
from challenge_platform.infrastructure.database.models import (
    Challenge,
    ChallengeCompletion,
    ChallengeParticipation,
    User,
)
from challenge_platform.repositories.base import (
    MAX_PAGE_SIZE,
    BaseRepository,
    validate_pagination,
)
from challenge_platform.repositories.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    StorageError,
    ValidationError,
)
from challenge_platform.repositories.types import (
    ChallengeDetailRecord,
    ChallengeSummaryRecord,
    ParticipationView,
)
from challenge_platform.shared.utils.logging import get_logger

logger = get_logger(__name__)

URL_NAME_CONSTRAINT = "uq_challenges_url_name"
PARTICIPATION_CONSTRAINT = "uq_participations_challenge_user"

participations_table = ChallengeParticipation.__table__
completions_table = ChallengeCompletion.__table__
challenges_table = Challenge.__table__


# ===========================================
# CONDITIONAL PARTICIPATION STATEMENTS
# ===========================================


def add_participation_statement(challenge_id: UUID, user_id: UUID) -> Insert:
    """Insert an active record unless the user has one or has completed.

    Returns the new row id, or nothing when the precondition failed.
    """
    already_completed = (
        select(completions_table.c.id)
        .where(
            completions_table.c.challenge_id == challenge_id,
            completions_table.c.user_id == user_id,
        )
        .exists()
    )
    source = select(
        cast(literal(challenge_id), PG_UUID(as_uuid=True)),
        cast(literal(user_id), PG_UUID(as_uuid=True)),
        true(),
    ).where(~already_completed)

    return (
        pg_insert(participations_table)
        .from_select(["challenge_id", "user_id", "active"], source, include_defaults=False)
        .on_conflict_do_nothing(constraint=PARTICIPATION_CONSTRAINT)
        .returning(participations_table.c.id)
    )


def set_participation_active_statement(challenge_id: UUID, user_id: UUID, active: bool) -> Update:
    """Flip the user's record to ``active`` only if it currently holds the opposite value."""
    return (
        update(participations_table)
        .where(
            participations_table.c.challenge_id == challenge_id,
            participations_table.c.user_id == user_id,
            participations_table.c.active.is_(not active),
        )
        .values(active=active)
        .returning(participations_table.c.id)
    )


def complete_statement(challenge_id: UUID, user_id: UUID) -> Insert:
    """Move an active participation into ``completed_by`` in one statement.

    Renders as ``WITH removed AS (DELETE ... RETURNING ...) INSERT ...
    SELECT FROM removed``; both changes commit or fail together, and nothing
    is inserted when no active record was deleted.
    """
    removed = (
        delete(participations_table)
        .where(
            participations_table.c.challenge_id == challenge_id,
            participations_table.c.user_id == user_id,
            participations_table.c.active.is_(True),
        )
        .returning(participations_table.c.challenge_id, participations_table.c.user_id)
        .cte("removed_participation")
    )
    return (
        insert(completions_table)
        .from_select(
            ["challenge_id", "user_id"],
            select(removed.c.challenge_id, removed.c.user_id),
            include_defaults=False,
        )
        .returning(completions_table.c.id)
    )


def increment_views_statement(url_name: str) -> Update:
    return (
        update(challenges_table)
        .where(challenges_table.c.url_name == url_name)
        .values(views=challenges_table.c.views + 1)
    )


def participation_statement(
    mutation: ParticipationMutation,
    challenge_id: UUID,
    user_id: UUID,
) -> Insert | Update:
    """Build the conditional statement for an approved mutation."""
    if mutation is ParticipationMutation.ADD:
        return add_participation_statement(challenge_id, user_id)
    if mutation is ParticipationMutation.RENEW:
        return set_participation_active_statement(challenge_id, user_id, active=True)
    if mutation is ParticipationMutation.PAUSE:
        return set_participation_active_statement(challenge_id, user_id, active=False)
    return complete_statement(challenge_id, user_id)


# ===========================================
# CHALLENGE REPOSITORY
# ===========================================


class ChallengeRepository(BaseRepository[Challenge]):
    """Repository for the challenge aggregate.

    Every write commits on its own; there is no multi-statement
    transaction spanning a read and a write.
    """

    def __init__(self, session: AsyncSession, max_page_size: int = MAX_PAGE_SIZE) -> None:
        """Initialize the challenge repository.

        Args:
            session: Async SQLAlchemy session
            max_page_size: Upper bound applied to listing page sizes
        """
        super().__init__(session)
        self.max_page_size = max_page_size

    @property
    def model_class(self) -> type[Challenge]:
        """Return the Challenge model class."""
        return Challenge

    # ===========================================
    # READ SIDE
    # ===========================================

    async def list_challenges(self, page: int, page_size: int) -> list[ChallengeSummaryRecord]:
        """List challenges, newest first, with participation counts only.

        Args:
            page: Page number; 0 and 1 both address the first page
            page_size: Items per page (capped at ``max_page_size``)

        Returns:
            Summary rows for the requested page

        Raises:
            ValidationError: If pagination parameters are invalid
            StorageError: If the query fails
        """
        limit, offset = validate_pagination(page, page_size, self.max_page_size)

        participant_count = (
            select(func.count(ChallengeParticipation.id))
            .where(ChallengeParticipation.challenge_id == Challenge.id)
            .correlate(Challenge)
            .scalar_subquery()
        )
        completed_count = (
            select(func.count(ChallengeCompletion.id))
            .where(ChallengeCompletion.challenge_id == Challenge.id)
            .correlate(Challenge)
            .scalar_subquery()
        )
        query = (
            select(
                Challenge.name,
                Challenge.url_name,
                Challenge.description,
                User.username.label("author_name"),
                participant_count.label("participant_count"),
                completed_count.label("completed_count"),
                Challenge.date_created,
                Challenge.views,
            )
            .join(User, User.id == Challenge.author_id)
            .order_by(Challenge.date_created.desc())
            .offset(offset)
            .limit(limit)
        )

        async with self.storage_operation("list_challenges", page=page, page_size=page_size):
            result = await self.session.execute(query)
            rows = result.all()

        return [ChallengeSummaryRecord(**row._mapping) for row in rows]

    async def get_detail(self, url_name: str) -> ChallengeDetailRecord:
        """Get one challenge with names resolved, recording a view.

        The view is recorded against the requested slug before the read.
        A failed increment is logged and otherwise ignored.

        Raises:
            EntityNotFoundError: If no challenge has this slug
            StorageError: If the read fails
        """
        try:
            await self.increment_views(url_name)
        except StorageError as e:
            logger.warning("view_increment_failed", url_name=url_name, error=str(e))

        query = (
            select(Challenge)
            .where(Challenge.url_name == url_name)
            .options(
                selectinload(Challenge.author),
                selectinload(Challenge.participations).selectinload(ChallengeParticipation.user),
                selectinload(Challenge.completions).selectinload(ChallengeCompletion.user),
            )
            .execution_options(populate_existing=True)
        )

        async with self.storage_operation("get_challenge_detail", url_name=url_name):
            result = await self.session.execute(query)
            challenge = result.scalar_one_or_none()

        if challenge is None:
            raise EntityNotFoundError("Challenge", url_name)

        return ChallengeDetailRecord(
            name=challenge.name,
            url_name=challenge.url_name,
            description=challenge.description,
            author_name=challenge.author.username,
            date_created=challenge.date_created,
            views=challenge.views,
            participations=[
                ParticipationView(user_name=p.user.username, active=p.active)
                for p in challenge.participations
            ],
            completed_by=[c.user.username for c in challenge.completions],
        )

    async def get_participation_snapshot(self, url_name: str) -> ParticipationSnapshot:
        """Read the participation records the state machine decides on.

        Raises:
            EntityNotFoundError: If no challenge has this slug
            StorageError: If a read fails
        """
        async with self.storage_operation("get_participation_snapshot", url_name=url_name):
            result = await self.session.execute(
                select(Challenge.id).where(Challenge.url_name == url_name)
            )
            challenge_id = result.scalar_one_or_none()
            if challenge_id is None:
                raise EntityNotFoundError("Challenge", url_name)

            participations = await self.session.execute(
                select(ChallengeParticipation.user_id, ChallengeParticipation.active)
                .where(ChallengeParticipation.challenge_id == challenge_id)
                .order_by(ChallengeParticipation.id)
            )
            completions = await self.session.execute(
                select(ChallengeCompletion.user_id)
                .where(ChallengeCompletion.challenge_id == challenge_id)
                .order_by(ChallengeCompletion.id)
            )

            return ParticipationSnapshot(
                challenge_id=challenge_id,
                url_name=url_name,
                participations=tuple(
                    ParticipationRecord(user_id=row.user_id, active=row.active)
                    for row in participations
                ),
                completed_by=tuple(completions.scalars().all()),
            )

    # ===========================================
    # WRITE SIDE
    # ===========================================

    async def create(
        self,
        *,
        url_name: str,
        name: str,
        description: str,
        author_id: UUID,
    ) -> Challenge:
        """Persist a new challenge authored by ``author_id``.

        Raises:
            DuplicateEntityError: If ``url_name`` is already taken
            ValidationError: If the author does not exist
            StorageError: If the insert fails for another reason
        """
        challenge = Challenge(
            url_name=url_name,
            name=name,
            description=description,
            author_id=author_id,
        )

        async with self.storage_operation("create_challenge", url_name=url_name):
            try:
                self.session.add(challenge)
                await self.session.flush()
                await self.session.commit()
            except IntegrityError as e:
                await self.session.rollback()
                if URL_NAME_CONSTRAINT in str(e.orig):
                    raise DuplicateEntityError("Challenge", "url_name", url_name) from e
                raise ValidationError(
                    f"Unknown author '{author_id}'", field="author_id"
                ) from e

        logger.info("challenge_created", url_name=url_name, author_id=str(author_id))
        return challenge

    async def apply_participation_change(
        self,
        challenge_id: UUID,
        mutation: ParticipationMutation,
        user_id: UUID,
    ) -> bool:
        """Apply one approved mutation as a single conditional statement.

        Returns:
            True if the row changed, False if the storage-level precondition
            no longer held (another request changed the record first)

        Raises:
            StorageError: If the statement fails
        """
        statement = participation_statement(mutation, challenge_id, user_id)

        async with self.storage_operation(
            "apply_participation_change",
            challenge_id=str(challenge_id),
            mutation=mutation.value,
            user_id=str(user_id),
        ):
            result = await self.session.execute(statement)
            applied = result.first() is not None
            await self.session.commit()

        logger.debug(
            "participation_statement_executed",
            challenge_id=str(challenge_id),
            mutation=mutation.value,
            applied=applied,
        )
        return applied

    async def increment_views(self, url_name: str) -> None:
        """Increment the view counter of the challenge with this slug.

        Raises:
            StorageError: If the update fails
        """
        async with self.storage_operation("increment_views", url_name=url_name):
            await self.session.execute(increment_views_statement(url_name))
            await self.session.commit()


__all__ = [
    "ChallengeRepository",
    "add_participation_statement",
    "complete_statement",
    "increment_views_statement",
    "participation_statement",
    "set_participation_active_statement",
]
