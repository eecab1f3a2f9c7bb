"""Onboarding domain router."""

from fastapi import APIRouter, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.decorators.auth import check_permission, require_permission
from src.api.core.dependencies import (
    AsyncSessionDep,
    CurrentActorDep,
    OnboardingEngineServiceDep,
)
from src.api.core.exceptions.base import AccessControlException
from src.api.core.exceptions.errors import JourneyNotFoundError
from src.api.core.messages import APIResponse, MessageCode
from src.api.onboarding.schemas import (
    CompleteStepRequest,
    JourneyStepsResponse,
    OnboardingStateModel,
    OnboardingStateResponse,
    StartJourneyRequest,
)
from src.core.context import AuthenticatedActorContext
from src.modules.roles.catalog import Permission

router = APIRouter(
    prefix="/onboarding",
    tags=["onboarding"],
)


async def _authorize_journey(
    db: AsyncSession,
    actor: AuthenticatedActorContext,
    user_id: str,
    organization_id: str | None,
    permission: Permission,
) -> str:
    """Resolve the journey organization and check the caller may act on it.

    Users act on their own journey only inside the organization of their token;
    any other user or organization needs ``permission`` in that organization.
    """
    resolved = organization_id or actor.organization_id
    if not resolved:
        raise AccessControlException(
            MessageCode.AUTH_MISSING_CONTEXT,
            status.HTTP_400_BAD_REQUEST,
            {"description": "organization_id is required"},
        )
    if actor.user_id == user_id and resolved == actor.organization_id:
        return resolved
    await check_permission(db, actor, permission, resolved)
    return resolved


@router.post("/journeys", response_model=OnboardingStateResponse)
async def start_user_journey(
    request: Request,
    journey_data: StartJourneyRequest,
    db: AsyncSessionDep,
    engine: OnboardingEngineServiceDep,
    current_actor: CurrentActorDep,
) -> OnboardingStateResponse:
    """Start (or resume) the onboarding journey of a user."""
    user_id = journey_data.user_id or current_actor.user_id
    organization_id = await _authorize_journey(
        db,
        current_actor,
        user_id,
        journey_data.organization_id,
        Permission.ORG_USER_MANAGE,
    )

    state = await engine.start_user_journey(
        user_id, organization_id, journey_data.organization_type
    )
    return APIResponse.success(
        message_code=MessageCode.JOURNEY_STARTED,
        data=OnboardingStateModel.model_validate(state),
    )


@router.get("/journeys/{user_id}", response_model=OnboardingStateResponse)
async def get_onboarding_state(
    user_id: str,
    request: Request,
    db: AsyncSessionDep,
    engine: OnboardingEngineServiceDep,
    current_actor: CurrentActorDep,
    organization_id: str | None = None,
) -> OnboardingStateResponse:
    """Get a user's onboarding journey, finished or not."""
    organization_id = await _authorize_journey(
        db, current_actor, user_id, organization_id, Permission.ORG_USER_VIEW
    )

    state = await engine.get_onboarding_state(
        user_id, organization_id, include_completed=True
    )
    if state is None:
        raise JourneyNotFoundError(user_id, organization_id)
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=OnboardingStateModel.model_validate(state),
    )


@router.post("/journeys/steps/{step_number}", response_model=OnboardingStateResponse)
async def complete_step(
    step_number: int,
    request: Request,
    step_data: CompleteStepRequest,
    db: AsyncSessionDep,
    engine: OnboardingEngineServiceDep,
    current_actor: CurrentActorDep,
) -> OnboardingStateResponse:
    """Submit the data of the current onboarding step."""
    user_id = step_data.user_id or current_actor.user_id
    organization_id = await _authorize_journey(
        db,
        current_actor,
        user_id,
        step_data.organization_id,
        Permission.ORG_USER_MANAGE,
    )

    state = await engine.complete_step(
        user_id, organization_id, step_number, step_data.data
    )
    return APIResponse.success(
        message_code=(
            MessageCode.ONBOARDING_COMPLETED
            if state.is_complete
            else MessageCode.STEP_COMPLETED
        ),
        data=OnboardingStateModel.model_validate(state),
    )


@router.get("/steps", response_model=JourneyStepsResponse)
@require_permission(Permission.ORG_ROLE_MANAGE)
async def get_user_journey_steps(
    request: Request,
    db: AsyncSessionDep,
    engine: OnboardingEngineServiceDep,
    current_actor: CurrentActorDep,
    organization_id: str | None = None,
) -> JourneyStepsResponse:
    """List the onboarding journey step definitions."""
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=engine.get_user_journey_steps(organization_id),
    )
