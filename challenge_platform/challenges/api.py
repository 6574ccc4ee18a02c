"""REST API endpoints for the challenge system."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from challenge_platform.config import Settings, get_settings
from challenge_platform.infrastructure.database.session import get_db
from challenge_platform.repositories.challenge_repository import ChallengeRepository
from challenge_platform.repositories.exceptions import (
    ConcurrencyError,
    DuplicateEntityError,
    EntityNotFoundError,
    StorageError,
    ValidationError,
)
from challenge_platform.shared.schemas.base import ErrorResponse
from challenge_platform.shared.utils.logging import get_logger

from .schemas import (
    ActionResponse,
    ChallengeDetail,
    ChallengeSummary,
    CreateChallengeRequest,
    CreatedChallengeResponse,
)
from .service import ChallengeService
from .state_machine import (
    AlreadyActiveError,
    AlreadyCompletedError,
    NotParticipatingError,
    ParticipationStateError,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/challenges", tags=["challenges"])

GENERIC_ERROR = "Something went wrong while processing your request."

GUARD_STATUS: dict[type[ParticipationStateError], int] = {
    AlreadyCompletedError: status.HTTP_409_CONFLICT,
    AlreadyActiveError: status.HTTP_400_BAD_REQUEST,
    NotParticipatingError: status.HTTP_409_CONFLICT,
}

PARTICIPATION_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# ===========================================
# DEPENDENCIES
# ===========================================


def get_challenge_repository(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> ChallengeRepository:
    return ChallengeRepository(db, max_page_size=settings.max_page_size)


def get_challenge_service(
    repository: ChallengeRepository = Depends(get_challenge_repository),
    settings: Settings = Depends(get_settings),
) -> ChallengeService:
    return ChallengeService(repository, settings)


def get_current_user_id(request: Request) -> UUID:
    """Extract the acting user from request state (set by auth middleware)."""
    user_context = getattr(request.state, "user", None)
    if not user_context:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return UUID(str(user_context["user_id"]))
    except (KeyError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user context",
        )


def _storage_failure(exc: StorageError) -> HTTPException:
    logger.error("challenge_request_failed", operation=exc.operation)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_ERROR)


async def _participation_action(action, url_name: str, user_id: UUID) -> ActionResponse:
    try:
        return await action(url_name, user_id)
    except ParticipationStateError as exc:
        raise HTTPException(status_code=GUARD_STATUS[type(exc)], detail=exc.message)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail=f"Challenge '{url_name}' not found")
    except ConcurrencyError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="The challenge was modified concurrently, please retry.",
        )
    except StorageError as exc:
        raise _storage_failure(exc)


# ===========================================
# CHALLENGE CRUD
# ===========================================


@router.get("", response_model=list[ChallengeSummary])
async def list_challenges(
    page: int = Query(default=0, ge=0, description="Page number, 0 and 1 are the first page"),
    amount: int | None = Query(default=None, ge=1, description="Challenges per page"),
    service: ChallengeService = Depends(get_challenge_service),
):
    """List challenges, newest first."""
    try:
        return await service.list_challenges(page=page, page_size=amount)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except StorageError as exc:
        raise _storage_failure(exc)


@router.get("/{url_name}", response_model=ChallengeDetail, responses={404: {"model": ErrorResponse}})
async def get_challenge(
    url_name: str,
    service: ChallengeService = Depends(get_challenge_service),
):
    """Get a single challenge by its url name."""
    try:
        return await service.get_challenge(url_name)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="No such challenge found :(")
    except StorageError as exc:
        raise _storage_failure(exc)


@router.post(
    "",
    response_model=CreatedChallengeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def create_challenge(
    data: CreateChallengeRequest,
    user_id: UUID = Depends(get_current_user_id),
    service: ChallengeService = Depends(get_challenge_service),
):
    """Create a new challenge authored by the acting user."""
    try:
        return await service.create_challenge(user_id, data)
    except DuplicateEntityError:
        raise HTTPException(
            status_code=400,
            detail="A challenge with such url name already exists!",
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except StorageError as exc:
        raise _storage_failure(exc)


# ===========================================
# PARTICIPATION
# ===========================================


@router.post("/{url_name}/participate", response_model=ActionResponse, responses=PARTICIPATION_RESPONSES)
async def participate(
    url_name: str,
    user_id: UUID = Depends(get_current_user_id),
    service: ChallengeService = Depends(get_challenge_service),
):
    """Participate in a challenge, or resume a paused participation."""
    return await _participation_action(service.participate, url_name, user_id)


@router.post("/{url_name}/unparticipate", response_model=ActionResponse, responses=PARTICIPATION_RESPONSES)
async def unparticipate(
    url_name: str,
    user_id: UUID = Depends(get_current_user_id),
    service: ChallengeService = Depends(get_challenge_service),
):
    """Pause an active participation."""
    return await _participation_action(service.unparticipate, url_name, user_id)


@router.post("/{url_name}/complete", response_model=ActionResponse, responses=PARTICIPATION_RESPONSES)
async def complete(
    url_name: str,
    user_id: UUID = Depends(get_current_user_id),
    service: ChallengeService = Depends(get_challenge_service),
):
    """Mark a challenge as completed."""
    return await _participation_action(service.complete, url_name, user_id)
