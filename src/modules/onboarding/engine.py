from typing import Any, cast

import resend
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from src.api.core.constants import SHOULD_SEND_WELCOME_EMAIL
from src.api.core.exceptions.errors import (
    InvalidStepNumberError,
    JourneyNotFoundError,
    StepValidationFailedError,
)
from src.core.base import BaseService
from src.database.models import EntityType, OnboardingState
from src.emails.render import (
    SUPPORTED_LOCALES,
    LocaleType,
    get_localized_url,
    render_email,
)
from src.modules.access.authority import AssignmentAuthorityService
from src.modules.onboarding.journey import (
    LAST_STEP,
    USER_JOURNEY_STEPS,
    JourneyStep,
    determine_final_roles,
    get_journey_step,
    validate_step_data,
)
from src.modules.roles.catalog import ONBOARDING_TEMPORARY_PERMISSIONS, permission_values
from src.utils.datetime_helpers import utcnow
from src.utils.settings.email import EmailSettings


class OnboardingEngineService(BaseService):
    """Runs the five-step onboarding journey for a user in an organization."""

    async def start_user_journey(
        self, user_id: str, organization_id: str, organization_type: EntityType
    ) -> OnboardingState:
        existing = await self._get_state(user_id, organization_id)
        if existing:
            return existing

        state = OnboardingState(
            user_id=user_id,
            organization_id=organization_id,
            organization_type=EntityType(organization_type).value,
            current_step=1,
            completed_steps=[],
            step_data={},
            is_complete=False,
            assigned_roles=[],
            temporary_permissions=permission_values(ONBOARDING_TEMPORARY_PERMISSIONS),
        )
        self.db.add(state)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another request started the same journey first
            await self.db.rollback()
            existing = await self._get_state(user_id, organization_id)
            if existing is None:
                raise
            return existing

        await self.db.refresh(state)
        self.logger.info(
            "Onboarding journey started",
            user_id=user_id,
            organization_id=organization_id,
            organization_type=state.organization_type,
        )
        return state

    async def get_onboarding_state(
        self, user_id: str, organization_id: str, include_completed: bool = False
    ) -> OnboardingState | None:
        state = await self._get_state(user_id, organization_id)
        if state is None or (state.is_complete and not include_completed):
            return None
        return state

    def get_user_journey_steps(
        self, organization_id: str | None = None
    ) -> list[JourneyStep]:
        # Every organization currently shares the standard journey
        return list(USER_JOURNEY_STEPS)

    async def complete_step(
        self,
        user_id: str,
        organization_id: str,
        step_number: int,
        data: dict[str, Any],
    ) -> OnboardingState:
        state = await self.get_onboarding_state(user_id, organization_id)
        if state is None:
            raise JourneyNotFoundError(user_id, organization_id)

        step = get_journey_step(step_number)
        if step is None:
            raise InvalidStepNumberError(step_number)
        if step_number != state.current_step:
            raise InvalidStepNumberError(step_number, expected_step=state.current_step)

        field_errors = validate_step_data(step, data)
        if field_errors:
            self.logger.warning(
                "Onboarding step validation failed",
                user_id=user_id,
                organization_id=organization_id,
                step=step_number,
                fields=sorted(field_errors),
            )
            raise StepValidationFailedError(step_number, field_errors)

        # JSON columns are only flagged dirty on reassignment
        state.step_data = {**state.step_data, f"step{step_number}": data}
        if step_number not in state.completed_steps:
            state.completed_steps = [*state.completed_steps, step_number]

        if step_number < LAST_STEP:
            state.current_step = step_number + 1
        else:
            state.is_complete = True
            state.completed_at = utcnow()
            state.assigned_roles = determine_final_roles(state.step_data)

        await self.db.commit()
        await self.db.refresh(state)
        self.logger.info(
            "Onboarding step completed",
            user_id=user_id,
            organization_id=organization_id,
            step=step_number,
            step_name=step.name,
        )

        if state.is_complete:
            await self.complete_onboarding(state)
        return state

    async def complete_onboarding(self, state: OnboardingState) -> None:
        """Grant the final roles, drop temporary permissions, send the welcome email."""
        authority = AssignmentAuthorityService(self.db)
        for role_name in state.assigned_roles:
            await authority.grant_system_role(
                user_id=state.user_id,
                role_name=role_name,
                organization_id=state.organization_id,
                reason="onboarding_completed",
            )

        # A rolled-back grant expires loaded instances
        await self.db.refresh(state)
        state.temporary_permissions = []
        await self.db.commit()
        await self.db.refresh(state)

        self.logger.info(
            "Onboarding completed",
            user_id=state.user_id,
            organization_id=state.organization_id,
            roles=state.assigned_roles,
        )

        profile = state.step_data.get("step2") or {}
        email = profile.get("email")
        if email:
            await self._send_welcome_email(
                email=email,
                first_name=profile.get("firstName"),
                roles=list(state.assigned_roles),
                locale=profile.get("language"),
            )

    async def _get_state(
        self, user_id: str, organization_id: str
    ) -> OnboardingState | None:
        result = await self.db.execute(
            select(OnboardingState).where(
                OnboardingState.user_id == user_id,
                OnboardingState.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def _send_welcome_email(
        self,
        email: str,
        first_name: str | None = None,
        roles: list[str] | None = None,
        locale: str | None = None,
    ) -> None:
        """Send welcome email to a newly onboarded user based on their locale."""
        if not SHOULD_SEND_WELCOME_EMAIL:
            self.logger.debug(
                f"Welcome email disabled by SHOULD_SEND_WELCOME_EMAIL flag for {email}"
            )
            return

        try:
            email_settings = EmailSettings()

            if not email_settings.RESEND_API_KEY:
                self.logger.warning(
                    f"RESEND_API_KEY not configured, skipping welcome email for {email}"
                )
                return

            resend.api_key = email_settings.RESEND_API_KEY

            valid_locale: LocaleType = "en"
            if locale and locale in SUPPORTED_LOCALES:
                valid_locale = cast(LocaleType, locale)

            email_data = render_email(
                template_name="welcome",
                locale=valid_locale,
                first_name=first_name,
                roles=roles or [],
                app_url=get_localized_url(email_settings.APP_BASE_URL, valid_locale),
            )

            from_address = (
                f"{email_settings.EMAIL_FROM_NAME} "
                f"<{email_settings.EMAIL_FROM_ADDRESS}@{email_settings.EMAIL_FROM_DOMAIN}>"
            )

            response = resend.Emails.send(
                {
                    "from": from_address,
                    "to": email,
                    "subject": email_data["subject"],
                    "html": email_data["html"],
                    "reply_to": email_data["reply_to"],
                    "tags": [{"name": "category", "value": "onboarding"}],
                }
            )

            self.logger.info(
                f"Welcome email sent successfully to {email}",
                email_id=response["id"],
                locale=valid_locale,
            )

        except Exception as e:
            self.logger.warning(
                f"Failed to send welcome email to {email}: {e}",
                error_type=type(e).__name__,
            )
