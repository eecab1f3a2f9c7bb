import pytest
from datetime import timedelta

from src.api.core.constants import PLATFORM_ORGANIZATION_ID
from src.modules.access.permissions import PermissionResolverService
from src.modules.roles.catalog import Permission
from src.utils.datetime_helpers import utcnow
from tests.conftest import OTHER_ORGANIZATION_ID, TEST_ORGANIZATION_ID


@pytest.mark.asyncio
async def test_permissions_are_union_of_active_roles(
    db_session, default_roles, bank_roles, grant_role
):
    await grant_role("user-multi", bank_roles["bank_officer"], TEST_ORGANIZATION_ID)
    await grant_role(
        "user-multi", default_roles["organization_viewer"], TEST_ORGANIZATION_ID
    )

    permissions = await PermissionResolverService(db_session).get_user_permissions(
        "user-multi", TEST_ORGANIZATION_ID
    )

    expected = set(bank_roles["bank_officer"].permissions) | set(
        default_roles["organization_viewer"].permissions
    )
    assert permissions == expected


@pytest.mark.asyncio
async def test_permissions_are_scoped_by_organization(
    db_session, default_roles, grant_role
):
    await grant_role("user-split", default_roles["organization_admin"], TEST_ORGANIZATION_ID)
    await grant_role(
        "user-split", default_roles["platform_support"], PLATFORM_ORGANIZATION_ID
    )
    service = PermissionResolverService(db_session)

    in_org = await service.get_user_permissions("user-split", TEST_ORGANIZATION_ID)
    elsewhere = await service.get_user_permissions("user-split", OTHER_ORGANIZATION_ID)
    platform = await service.get_user_permissions("user-split", PLATFORM_ORGANIZATION_ID)
    everywhere = await service.get_user_permissions("user-split")

    assert Permission.ORG_USER_MANAGE.value in in_org
    assert elsewhere == set()
    assert all(p.startswith("platform:") for p in platform)
    assert everywhere == in_org | platform


@pytest.mark.asyncio
async def test_expired_revoked_and_inactive_roles_grant_nothing(
    db_session, default_roles, role_factory, grant_role
):
    retired = await role_factory.create_async(
        db_session, permissions=["report:admin"], is_active=False
    )
    await db_session.commit()
    await grant_role("user-none", retired, TEST_ORGANIZATION_ID)
    await grant_role(
        "user-none",
        default_roles["organization_user"],
        TEST_ORGANIZATION_ID,
        expires_at=utcnow() - timedelta(seconds=30),
    )
    await grant_role(
        "user-none",
        default_roles["organization_manager"],
        TEST_ORGANIZATION_ID,
        is_active=False,
    )

    service = PermissionResolverService(db_session)

    assert await service.get_user_permissions("user-none", TEST_ORGANIZATION_ID) == set()
    assert not await service.has_permission(
        "user-none", "report:admin", TEST_ORGANIZATION_ID
    )


@pytest.mark.asyncio
async def test_has_permission_accepts_enum_and_string(
    db_session, bank_roles, grant_role
):
    await grant_role("user-officer", bank_roles["bank_officer"], TEST_ORGANIZATION_ID)
    service = PermissionResolverService(db_session)

    assert await service.has_permission(
        "user-officer", Permission.LC_CREATE, TEST_ORGANIZATION_ID
    )
    assert await service.has_permission(
        "user-officer", "document:verify", TEST_ORGANIZATION_ID
    )
    assert not await service.has_permission(
        "user-officer", Permission.LC_APPROVE, TEST_ORGANIZATION_ID
    )
    assert not await service.has_permission(
        "user-officer", Permission.LC_CREATE, OTHER_ORGANIZATION_ID
    )
