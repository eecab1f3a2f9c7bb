"""create_access_control_tables

Revision ID: 4c1e2b7d9a10
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "4c1e2b7d9a10"
down_revision = None
branch_labels = None
depends_on = None

JSONB = postgresql.JSONB(astext_type=sa.Text())


def upgrade() -> None:
    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("level", sa.String(length=32), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("permissions", JSONB, nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        sa.Column("is_system_role", sa.Boolean(), nullable=False),
        sa.Column("organization_id", sa.String(length=64), nullable=True),
        sa.Column("entity_type", sa.String(length=32), nullable=True),
        sa.Column(
            "parent_role_id",
            sa.Uuid(),
            sa.ForeignKey("roles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("child_roles", JSONB, nullable=False),
        sa.Column("restrictions", JSONB, nullable=False),
        sa.Column("role_metadata", JSONB, nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(length=64), nullable=False),
        sa.Column("updated_by", sa.String(length=64), nullable=True),
    )
    op.create_index("ix_roles_organization_id", "roles", ["organization_id"])
    # Platform roles (organization_id IS NULL) share one scope key
    op.create_index(
        "uq_roles_name_scope",
        "roles",
        ["name", sa.text("coalesce(organization_id, '')")],
        unique=True,
    )

    op.create_table(
        "user_role_assignments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "role_id",
            sa.Uuid(),
            sa.ForeignKey("roles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("assigned_by", sa.String(length=64), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_temporary", sa.Boolean(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("restrictions", JSONB, nullable=False),
        sa.Column("assignment_metadata", JSONB, nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(length=64), nullable=True),
    )
    op.create_index(
        "ix_user_role_assignments_user_id", "user_role_assignments", ["user_id"]
    )
    op.create_index(
        "ix_user_role_assignments_role_id", "user_role_assignments", ["role_id"]
    )
    op.create_index(
        "ix_user_role_assignments_user_org",
        "user_role_assignments",
        ["user_id", "organization_id"],
    )
    # At most one active binding per (user, role, organization)
    op.create_index(
        "uq_active_user_role_assignment",
        "user_role_assignments",
        ["user_id", "role_id", "organization_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "role_hierarchies",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("hierarchy_tree", JSONB, nullable=False),
        sa.Column("default_roles", JSONB, nullable=False),
        sa.Column("allowed_roles", JSONB, nullable=False),
        sa.Column("custom_roles", JSONB, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("organization_id"),
    )

    op.create_table(
        "onboarding_states",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("organization_id", sa.String(length=64), nullable=False),
        sa.Column("organization_type", sa.String(length=32), nullable=False),
        sa.Column("current_step", sa.Integer(), nullable=False),
        sa.Column("completed_steps", JSONB, nullable=False),
        sa.Column("step_data", JSONB, nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_complete", sa.Boolean(), nullable=False),
        sa.Column("assigned_roles", JSONB, nullable=False),
        sa.Column("temporary_permissions", JSONB, nullable=False),
        sa.UniqueConstraint(
            "user_id", "organization_id", name="unique_user_org_onboarding"
        ),
    )
    op.create_index("ix_onboarding_states_user_id", "onboarding_states", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_onboarding_states_user_id", table_name="onboarding_states")
    op.drop_table("onboarding_states")
    op.drop_table("role_hierarchies")
    op.drop_index("uq_active_user_role_assignment", table_name="user_role_assignments")
    op.drop_index(
        "ix_user_role_assignments_user_org", table_name="user_role_assignments"
    )
    op.drop_index(
        "ix_user_role_assignments_role_id", table_name="user_role_assignments"
    )
    op.drop_index(
        "ix_user_role_assignments_user_id", table_name="user_role_assignments"
    )
    op.drop_table("user_role_assignments")
    op.drop_index("uq_roles_name_scope", table_name="roles")
    op.drop_index("ix_roles_organization_id", table_name="roles")
    op.drop_table("roles")
