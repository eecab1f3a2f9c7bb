import pytest
from sqlalchemy import select

from src.api.core.exceptions.errors import (
    DuplicateRoleError,
    RoleInUseError,
    RoleNotFoundError,
    SystemRoleProtectedError,
)
from src.api.core.messages import MessageCode
from src.database.models import EntityType, RoleCategory, RoleHierarchy, RoleLevel
from src.modules.roles.models import RoleCreate, RoleUpdate
from src.modules.roles.registry import RoleRegistryService
from src.modules.roles.restrictions import (
    IpBasedRestriction,
    IpAllowList,
    RoleMetadata,
    load_role_restrictions,
)
from tests.conftest import OTHER_ORGANIZATION_ID, TEST_ORGANIZATION_ID
from tests.utils.assertions import assert_access_exception


def _definition(**overrides) -> RoleCreate:
    values = {
        "name": "trade_reviewer",
        "display_name": "Trade Reviewer",
        "description": "Reviews letters of credit",
        "level": RoleLevel.ORGANIZATION_STANDARD,
        "category": RoleCategory.SPECIALIST,
        "permissions": ["lc:view", "document:verify"],
        "organization_id": TEST_ORGANIZATION_ID,
    }
    values.update(overrides)
    return RoleCreate(**values)


@pytest.mark.asyncio
async def test_create_role_round_trips_through_get_by_name(db_session):
    service = RoleRegistryService(db_session)
    definition = _definition(
        entity_type=EntityType.BANK,
        restrictions=[
            IpBasedRestriction(
                value=IpAllowList(cidrs=["10.0.0.0/8"]),
                description="Office network",
            )
        ],
        metadata=RoleMetadata(department_id="trade-ops", cost_center="CC-42"),
    )

    created = await service.create_role(definition, created_by="user-creator")
    fetched = await service.get_role_by_name("trade_reviewer", TEST_ORGANIZATION_ID)

    assert fetched is not None
    assert fetched.id == created.id
    assert fetched.display_name == "Trade Reviewer"
    assert fetched.description == "Reviews letters of credit"
    assert fetched.level == RoleLevel.ORGANIZATION_STANDARD.value
    assert fetched.category == RoleCategory.SPECIALIST.value
    assert fetched.permissions == ["lc:view", "document:verify"]
    assert fetched.organization_id == TEST_ORGANIZATION_ID
    assert fetched.entity_type == EntityType.BANK.value
    assert fetched.is_active is True
    assert fetched.is_system_role is False
    assert fetched.created_by == "user-creator"
    assert fetched.role_metadata["department_id"] == "trade-ops"

    restrictions = load_role_restrictions(fetched.restrictions)
    assert len(restrictions) == 1
    assert restrictions[0].type == "ip_based"
    assert restrictions[0].value.cidrs == ["10.0.0.0/8"]


@pytest.mark.asyncio
async def test_create_role_rejects_duplicate_name_in_same_scope(db_session):
    service = RoleRegistryService(db_session)
    await service.create_role(_definition(), created_by="user-creator")

    with pytest.raises(DuplicateRoleError) as exc_info:
        await service.create_role(_definition(), created_by="user-creator")

    assert_access_exception(exc_info.value, MessageCode.DUPLICATE_ROLE, 409)


@pytest.mark.asyncio
async def test_same_role_name_allowed_in_different_organizations(db_session):
    service = RoleRegistryService(db_session)
    first = await service.create_role(_definition(), created_by="user-creator")
    second = await service.create_role(
        _definition(organization_id=OTHER_ORGANIZATION_ID), created_by="user-creator"
    )

    assert first.id != second.id
    assert (await service.get_role_by_name("trade_reviewer")) is None


@pytest.mark.asyncio
async def test_create_role_links_parent_child_roles(db_session):
    service = RoleRegistryService(db_session)
    parent = await service.create_role(
        _definition(name="trade_lead", level=RoleLevel.ORGANIZATION_ADMIN),
        created_by="user-creator",
    )

    child = await service.create_role(
        _definition(parent_role_id=parent.id), created_by="user-creator"
    )

    await db_session.refresh(parent)
    assert child.parent_role_id == parent.id
    assert parent.child_roles == [str(child.id)]


@pytest.mark.asyncio
async def test_create_role_with_unknown_parent_raises_not_found(db_session):
    from uuid import uuid4

    service = RoleRegistryService(db_session)

    with pytest.raises(RoleNotFoundError):
        await service.create_role(
            _definition(parent_role_id=uuid4()), created_by="user-creator"
        )


@pytest.mark.asyncio
async def test_get_roles_by_organization_orders_by_level_and_includes_system_roles(
    db_session, default_roles, role_factory
):
    await role_factory.create_async(
        db_session, name="zz_entity_role", level=RoleLevel.ENTITY_SPECIFIC.value
    )
    await role_factory.create_async(
        db_session, name="foreign_role", organization_id=OTHER_ORGANIZATION_ID
    )
    await db_session.commit()
    service = RoleRegistryService(db_session)

    roles = await service.get_roles_by_organization(TEST_ORGANIZATION_ID)
    names = [role.name for role in roles]

    assert names[:3] == ["platform_admin", "platform_super_admin", "platform_support"]
    assert names[-1] == "zz_entity_role"
    assert "foreign_role" not in names
    assert "organization_admin" in names

    own_only = await service.get_roles_by_organization(
        TEST_ORGANIZATION_ID, include_system=False
    )
    assert [role.name for role in own_only] == ["zz_entity_role"]

    entity_level = await service.get_roles_by_organization(
        TEST_ORGANIZATION_ID, level=RoleLevel.ENTITY_SPECIFIC
    )
    assert [role.name for role in entity_level] == ["zz_entity_role"]


@pytest.mark.asyncio
async def test_factory_built_role_persists_declared_defaults(db_session, role_factory):
    role = await role_factory.create_async(db_session)
    await db_session.commit()

    stored = await RoleRegistryService(db_session).get_role_by_id(role.id)

    assert stored.display_name.startswith("Custom Role")
    assert stored.level == RoleLevel.ORGANIZATION_STANDARD.value
    assert stored.created_by == "user-factory"
    assert stored.organization_id == TEST_ORGANIZATION_ID


@pytest.mark.asyncio
async def test_get_platform_roles_returns_platform_level_only(db_session, default_roles):
    roles = await RoleRegistryService(db_session).get_platform_roles()

    assert [role.name for role in roles] == [
        "platform_admin",
        "platform_super_admin",
        "platform_support",
    ]


@pytest.mark.asyncio
async def test_update_role_applies_only_provided_fields(db_session):
    service = RoleRegistryService(db_session)
    role = await service.create_role(_definition(), created_by="user-creator")

    updated = await service.update_role(
        role.id,
        RoleUpdate(permissions=["lc:view", "lc:view", "report:view"]),
        updated_by="user-editor",
    )

    assert updated.permissions == ["lc:view", "report:view"]
    assert updated.display_name == "Trade Reviewer"
    assert updated.updated_by == "user-editor"


def test_role_update_rejects_immutable_fields():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        RoleUpdate.model_validate({"level": "platform"})
    with pytest.raises(ValidationError):
        RoleUpdate.model_validate({"organization_id": "org-elsewhere"})


def test_role_create_rejects_platform_or_system_roles_in_organization():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        _definition(level=RoleLevel.PLATFORM)
    with pytest.raises(ValidationError):
        _definition(is_system_role=True)

    platform_role = _definition(
        level=RoleLevel.PLATFORM, is_system_role=True, organization_id=None
    )
    assert platform_role.is_system_role is True


@pytest.mark.asyncio
async def test_update_missing_role_raises_not_found(db_session):
    from uuid import uuid4

    with pytest.raises(RoleNotFoundError):
        await RoleRegistryService(db_session).update_role(
            uuid4(), RoleUpdate(description="x"), updated_by="user-editor"
        )


@pytest.mark.asyncio
async def test_delete_role_soft_deactivates(db_session):
    service = RoleRegistryService(db_session)
    role = await service.create_role(_definition(), created_by="user-creator")

    deleted = await service.delete_role(role.id, deleted_by="user-deleter")

    assert deleted.is_active is False
    remaining = await service.get_roles_by_organization(
        TEST_ORGANIZATION_ID, include_system=False
    )
    assert remaining == []
    assert await service.get_role_by_id(role.id) is not None


@pytest.mark.asyncio
async def test_delete_system_role_is_protected(db_session, default_roles):
    service = RoleRegistryService(db_session)

    with pytest.raises(SystemRoleProtectedError) as exc_info:
        await service.delete_role(
            default_roles["organization_user"].id, deleted_by="user-deleter"
        )

    assert_access_exception(exc_info.value, MessageCode.SYSTEM_ROLE_PROTECTED, 403)


@pytest.mark.asyncio
async def test_delete_role_in_use_is_rejected(db_session, grant_role):
    service = RoleRegistryService(db_session)
    role = await service.create_role(_definition(), created_by="user-creator")
    await grant_role("user-holder", role, TEST_ORGANIZATION_ID)

    with pytest.raises(RoleInUseError) as exc_info:
        await service.delete_role(role.id, deleted_by="user-deleter")

    assert exc_info.value.details["active_assignments"] == 1


@pytest.mark.asyncio
async def test_update_role_cannot_deactivate_system_role(db_session, default_roles):
    service = RoleRegistryService(db_session)
    role_id = default_roles["organization_admin"].id

    with pytest.raises(SystemRoleProtectedError):
        await service.update_role(
            role_id, RoleUpdate(is_active=False), updated_by="user-editor"
        )

    assert (await service.get_role_by_id(role_id)).is_active is True


@pytest.mark.asyncio
async def test_update_role_cannot_deactivate_role_in_use(db_session, grant_role):
    service = RoleRegistryService(db_session)
    role = await service.create_role(_definition(), created_by="user-creator")
    await grant_role("user-holder", role, TEST_ORGANIZATION_ID)

    with pytest.raises(RoleInUseError) as exc_info:
        await service.update_role(
            role.id,
            RoleUpdate(display_name="Retired", is_active=False),
            updated_by="user-editor",
        )

    assert exc_info.value.details["active_assignments"] == 1
    unchanged = await service.get_role_by_id(role.id)
    assert unchanged.is_active is True
    assert unchanged.display_name == "Trade Reviewer"


@pytest.mark.asyncio
async def test_update_role_deactivates_unused_role(db_session):
    service = RoleRegistryService(db_session)
    role = await service.create_role(_definition(), created_by="user-creator")

    updated = await service.update_role(
        role.id, RoleUpdate(is_active=False), updated_by="user-editor"
    )

    assert updated.is_active is False


@pytest.mark.asyncio
async def test_delete_role_ignores_expired_assignments(db_session, grant_role):
    from datetime import timedelta

    from src.utils.datetime_helpers import utcnow

    service = RoleRegistryService(db_session)
    role = await service.create_role(_definition(), created_by="user-creator")
    await grant_role(
        "user-holder",
        role,
        TEST_ORGANIZATION_ID,
        expires_at=utcnow() - timedelta(days=1),
    )

    deleted = await service.delete_role(role.id, deleted_by="user-deleter")

    assert deleted.is_active is False


@pytest.mark.asyncio
async def test_initialize_default_roles_is_idempotent(db_session):
    service = RoleRegistryService(db_session)

    created = await service.initialize_default_roles()
    again = await service.initialize_default_roles()

    assert {role.name for role in created} == {
        "platform_super_admin",
        "platform_admin",
        "platform_support",
        "organization_super_admin",
        "organization_admin",
        "organization_manager",
        "organization_user",
        "organization_viewer",
    }
    assert again == []
    assert all(role.is_system_role and role.organization_id is None for role in created)


@pytest.mark.asyncio
async def test_initialize_organization_roles_seeds_templates_and_hierarchy(
    db_session, default_roles
):
    service = RoleRegistryService(db_session)

    created = await service.initialize_organization_roles(
        TEST_ORGANIZATION_ID, EntityType.BANK
    )

    assert sorted(role.name for role in created) == ["bank_admin", "bank_officer"]
    assert all(role.organization_id == TEST_ORGANIZATION_ID for role in created)
    assert all(role.is_default and not role.is_system_role for role in created)

    result = await db_session.execute(
        select(RoleHierarchy).where(
            RoleHierarchy.organization_id == TEST_ORGANIZATION_ID
        )
    )
    snapshot = result.scalar_one()
    assert {str(role.id) for role in created} <= set(snapshot.allowed_roles)

    assert await service.initialize_organization_roles(
        TEST_ORGANIZATION_ID, EntityType.BANK
    ) == []
