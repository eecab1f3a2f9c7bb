"""Role assignment endpoint tests."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from src.api.core.constants import PLATFORM_ORGANIZATION_ID
from src.api.core.messages import MessageCode
from src.utils.datetime_helpers import utcnow
from tests.conftest import OTHER_ORGANIZATION_ID, TEST_ORGANIZATION_ID
from tests.utils.assertions import (
    assert_authentication_error,
    assert_error_response,
    assert_permission_error,
    assert_success_response,
)


def grant_payload(user_id: str, role, organization_id: str = TEST_ORGANIZATION_ID):
    return {
        "user_id": user_id,
        "role_id": str(role.id),
        "organization_id": organization_id,
    }


@pytest.mark.asyncio
async def test_org_admin_grants_permitted_role(
    app, org_admin_client: AsyncClient, default_roles
):
    """Test organization admin granting a role from its assignment rule."""
    response = await org_admin_client.post(
        "/v1/assignments/",
        json={
            **grant_payload("user-new-analyst", default_roles["organization_user"]),
            "expires_at": (utcnow() + timedelta(days=30)).isoformat(),
            "is_temporary": True,
            "metadata": {"assignment_reason": "Quarter-end cover"},
        },
    )

    assert_success_response(
        response,
        MessageCode.ROLE_GRANTED,
        data_assertions={
            "user_id": "user-new-analyst",
            "role_id": str(default_roles["organization_user"].id),
            "organization_id": TEST_ORGANIZATION_ID,
            "assigned_by": "user-org-admin",
            "is_active": True,
            "is_temporary": True,
            "metadata.assignment_reason": "Quarter-end cover",
        },
    )


@pytest.mark.asyncio
async def test_org_admin_cannot_grant_higher_role(
    app, org_admin_client: AsyncClient, default_roles
):
    """Test organization admin granting a role outside its rule."""
    response = await org_admin_client.post(
        "/v1/assignments/",
        json=grant_payload("user-climber", default_roles["organization_super_admin"]),
    )

    body = assert_permission_error(response)
    assert "role_id" not in body["details"]


@pytest.mark.asyncio
async def test_platform_admin_grants_platform_role(
    app, platform_admin_client: AsyncClient, default_roles
):
    """Test platform roles are granted in the platform scope."""
    response = await platform_admin_client.post(
        "/v1/assignments/",
        json=grant_payload(
            "user-support-agent",
            default_roles["platform_support"],
            PLATFORM_ORGANIZATION_ID,
        ),
    )

    assert_success_response(
        response,
        MessageCode.ROLE_GRANTED,
        data_assertions={"organization_id": PLATFORM_ORGANIZATION_ID},
    )


@pytest.mark.asyncio
async def test_grant_platform_role_in_organization_scope(
    app, platform_admin_client: AsyncClient, default_roles
):
    """Test platform roles cannot be bound to an organization."""
    response = await platform_admin_client.post(
        "/v1/assignments/",
        json=grant_payload("user-support-agent", default_roles["platform_support"]),
    )

    assert_error_response(response, MessageCode.ORGANIZATION_MISMATCH, 400)


@pytest.mark.asyncio
async def test_grant_duplicate_assignment(
    app, org_admin_client: AsyncClient, default_roles
):
    """Test granting a role the user already holds."""
    payload = grant_payload("user-twice", default_roles["organization_viewer"])
    first = await org_admin_client.post("/v1/assignments/", json=payload)
    assert_success_response(first, MessageCode.ROLE_GRANTED)

    response = await org_admin_client.post("/v1/assignments/", json=payload)

    assert_error_response(response, MessageCode.ROLE_ASSIGNMENT_EXISTS, 409)


@pytest.mark.asyncio
async def test_grant_unknown_role(app, org_admin_client: AsyncClient):
    """Test granting a role id that does not exist."""
    response = await org_admin_client.post(
        "/v1/assignments/",
        json={
            "user_id": "user-x",
            "role_id": "00000000-0000-0000-0000-000000000000",
            "organization_id": TEST_ORGANIZATION_ID,
        },
    )

    assert_error_response(response, MessageCode.ROLE_NOT_FOUND, 404)


@pytest.mark.asyncio
async def test_grant_with_past_expiry_rejected(
    app, org_admin_client: AsyncClient, default_roles
):
    """Test expiry dates must be in the future."""
    response = await org_admin_client.post(
        "/v1/assignments/",
        json={
            **grant_payload("user-x", default_roles["organization_user"]),
            "expires_at": (utcnow() - timedelta(days=1)).isoformat(),
        },
    )

    assert_error_response(response, MessageCode.INVALID_INPUT, 422)


@pytest.mark.asyncio
async def test_grant_requires_authentication(
    app, public_client: AsyncClient, default_roles
):
    """Test granting without a bearer token."""
    response = await public_client.post(
        "/v1/assignments/",
        json=grant_payload("user-x", default_roles["organization_user"]),
    )

    assert_authentication_error(response)


@pytest.mark.asyncio
async def test_revoke_role(app, org_admin_client: AsyncClient, default_roles, grant_role):
    """Test revoking an active assignment."""
    role = default_roles["organization_user"]
    await grant_role("user-leaving", role, TEST_ORGANIZATION_ID)

    response = await org_admin_client.post(
        "/v1/assignments/revoke", json=grant_payload("user-leaving", role)
    )

    assert_success_response(
        response,
        MessageCode.ROLE_REVOKED,
        data_assertions={"is_active": False, "revoked_by": "user-org-admin"},
    )

    again = await org_admin_client.post(
        "/v1/assignments/revoke", json=grant_payload("user-leaving", role)
    )
    assert_error_response(again, MessageCode.ASSIGNMENT_NOT_FOUND, 404)


@pytest.mark.asyncio
async def test_user_reads_own_roles_across_organizations(
    app, client_factory, default_roles, grant_role
):
    """Test a user can list their own assignments without a permission."""
    await grant_role("user-self", default_roles["organization_user"], TEST_ORGANIZATION_ID)
    await grant_role(
        "user-self", default_roles["organization_viewer"], OTHER_ORGANIZATION_ID
    )

    async with client_factory("user-self") as client:
        everywhere = await client.get("/v1/assignments/users/user-self")
        scoped = await client.get(
            "/v1/assignments/users/user-self",
            params={"organization_id": OTHER_ORGANIZATION_ID},
        )

    assert len(assert_success_response(everywhere)) == 2
    scoped_data = assert_success_response(scoped)
    assert [a["organization_id"] for a in scoped_data] == [OTHER_ORGANIZATION_ID]


@pytest.mark.asyncio
async def test_reading_other_users_roles_needs_user_view(
    app, org_admin_client: AsyncClient, member_client: AsyncClient, default_roles, grant_role
):
    """Test listing another user's roles requires org:user_view."""
    await grant_role("user-target", default_roles["organization_user"], TEST_ORGANIZATION_ID)
    await grant_role(
        "user-target", default_roles["organization_viewer"], OTHER_ORGANIZATION_ID
    )

    response = await org_admin_client.get("/v1/assignments/users/user-target")
    data = assert_success_response(response)
    assert [a["organization_id"] for a in data] == [TEST_ORGANIZATION_ID]

    assert_permission_error(
        await member_client.get("/v1/assignments/users/user-target")
    )
    assert_permission_error(
        await org_admin_client.get(
            "/v1/assignments/users/user-target",
            params={"organization_id": OTHER_ORGANIZATION_ID},
        )
    )


@pytest.mark.asyncio
async def test_get_user_permissions(
    app, org_admin_client: AsyncClient, bank_roles, default_roles, grant_role
):
    """Test effective permissions are the sorted union of active roles."""
    await grant_role("user-officer", bank_roles["bank_officer"], TEST_ORGANIZATION_ID)
    await grant_role(
        "user-officer",
        default_roles["organization_manager"],
        TEST_ORGANIZATION_ID,
        expires_at=utcnow() - timedelta(hours=1),
    )

    response = await org_admin_client.get("/v1/assignments/users/user-officer/permissions")

    data = assert_success_response(
        response,
        data_assertions={
            "user_id": "user-officer",
            "organization_id": TEST_ORGANIZATION_ID,
        },
    )
    assert data["permissions"] == sorted(bank_roles["bank_officer"].permissions)


@pytest.mark.asyncio
async def test_get_own_permissions_without_roles(app, member_client: AsyncClient):
    """Test a user without roles sees an empty permission set."""
    response = await member_client.get(
        "/v1/assignments/users/user-plain-member/permissions"
    )

    assert_success_response(
        response,
        data_assertions={"permissions": [], "organization_id": None},
    )
