"""Static permission, role and assignment-rule catalogs."""

from dataclasses import dataclass, field
from enum import Enum

from src.database.models.roles import EntityType, RoleCategory, RoleLevel


class Permission(str, Enum):
    # Platform management
    PLATFORM_FULL_ACCESS = "platform:full_access"
    PLATFORM_USER_MANAGE = "platform:user_manage"
    PLATFORM_ORG_MANAGE = "platform:org_manage"
    PLATFORM_ROLE_MANAGE = "platform:role_manage"
    PLATFORM_SYSTEM_CONFIG = "platform:system_config"
    PLATFORM_MONITORING = "platform:monitoring"
    PLATFORM_AUDIT = "platform:audit"
    PLATFORM_BILLING = "platform:billing"
    PLATFORM_SUPPORT = "platform:support"
    PLATFORM_TENANT_CREATE = "platform:tenant_create"
    PLATFORM_TENANT_DELETE = "platform:tenant_delete"
    PLATFORM_TENANT_CONFIGURE = "platform:tenant_configure"
    PLATFORM_DATA_ISOLATION = "platform:data_isolation"
    PLATFORM_MAINTENANCE = "platform:maintenance"
    PLATFORM_BACKUP = "platform:backup"
    PLATFORM_SECURITY = "platform:security"
    PLATFORM_REPORTS = "platform:reports"

    # Organization management
    ORG_FULL_ACCESS = "org:full_access"
    ORG_SETTINGS = "org:settings"
    ORG_BRANDING = "org:branding"
    ORG_BILLING = "org:billing"
    ORG_AUDIT = "org:audit"
    ORG_USER_CREATE = "org:user_create"
    ORG_USER_DELETE = "org:user_delete"
    ORG_USER_MANAGE = "org:user_manage"
    ORG_USER_VIEW = "org:user_view"
    ORG_ROLE_CREATE = "org:role_create"
    ORG_ROLE_DELETE = "org:role_delete"
    ORG_ROLE_ASSIGN = "org:role_assign"
    ORG_ROLE_MANAGE = "org:role_manage"
    ORG_DEPT_MANAGE = "org:dept_manage"
    ORG_STRUCTURE_MANAGE = "org:structure_manage"
    ORG_WORKFLOW_MANAGE = "org:workflow_manage"
    ORG_REPORTS_VIEW = "org:reports_view"
    ORG_ANALYTICS_VIEW = "org:analytics_view"
    ORG_EXPORT_DATA = "org:export_data"

    # Letter of credit
    LC_CREATE = "lc:create"
    LC_VIEW = "lc:view"
    LC_VIEW_ALL = "lc:view_all"
    LC_EDIT = "lc:edit"
    LC_APPROVE = "lc:approve"
    LC_REJECT = "lc:reject"
    LC_AMEND = "lc:amend"
    LC_CANCEL = "lc:cancel"
    LC_CLOSE = "lc:close"
    LC_REOPEN = "lc:reopen"

    # Documents
    DOCUMENT_UPLOAD = "document:upload"
    DOCUMENT_VIEW = "document:view"
    DOCUMENT_VERIFY = "document:verify"
    DOCUMENT_REJECT = "document:reject"
    DOCUMENT_DOWNLOAD = "document:download"
    DOCUMENT_DELETE = "document:delete"
    DOCUMENT_MANAGE = "document:manage"

    # Payments
    PAYMENT_INITIATE = "payment:initiate"
    PAYMENT_APPROVE = "payment:approve"
    PAYMENT_VIEW = "payment:view"
    PAYMENT_PROCESS = "payment:process"
    PAYMENT_RECONCILE = "payment:reconcile"

    # Trade finance
    TRADE_FINANCE_VIEW = "trade_finance:view"
    TRADE_FINANCE_MANAGE = "trade_finance:manage"
    TRADE_FINANCE_APPROVE = "trade_finance:approve"

    # KYC
    KYC_VIEW = "kyc:view"
    KYC_VERIFY = "kyc:verify"
    KYC_MANAGE = "kyc:manage"
    KYC_APPROVE = "kyc:approve"

    # Compliance
    COMPLIANCE_VIEW = "compliance:view"
    COMPLIANCE_MANAGE = "compliance:manage"
    COMPLIANCE_AUDIT = "compliance:audit"

    # Reporting
    REPORT_VIEW = "report:view"
    REPORT_CREATE = "report:create"
    REPORT_EXPORT = "report:export"
    REPORT_ADMIN = "report:admin"

    # Onboarding journey
    ORG_VIEW = "org:view"
    PROFILE_VIEW = "profile:view"
    PROFILE_EDIT = "profile:edit"
    ONBOARDING_ACCESS = "onboarding:access"
    SECURITY_SETUP = "security:setup"
    MFA_SETUP = "mfa:setup"
    PREFERENCES_EDIT = "preferences:edit"
    TRAINING_ACCESS = "training:access"


PLATFORM_PERMISSIONS: list[Permission] = [
    p for p in Permission if p.value.startswith("platform:")
]

ORGANIZATION_PERMISSIONS: list[Permission] = [
    Permission.ORG_FULL_ACCESS,
    Permission.ORG_SETTINGS,
    Permission.ORG_BRANDING,
    Permission.ORG_BILLING,
    Permission.ORG_AUDIT,
    Permission.ORG_USER_CREATE,
    Permission.ORG_USER_DELETE,
    Permission.ORG_USER_MANAGE,
    Permission.ORG_USER_VIEW,
    Permission.ORG_ROLE_CREATE,
    Permission.ORG_ROLE_DELETE,
    Permission.ORG_ROLE_ASSIGN,
    Permission.ORG_ROLE_MANAGE,
    Permission.ORG_DEPT_MANAGE,
    Permission.ORG_STRUCTURE_MANAGE,
    Permission.ORG_WORKFLOW_MANAGE,
    Permission.ORG_REPORTS_VIEW,
    Permission.ORG_ANALYTICS_VIEW,
    Permission.ORG_EXPORT_DATA,
]

BUSINESS_PERMISSIONS: list[Permission] = [
    p
    for p in Permission
    if p.value.split(":")[0]
    in {"lc", "document", "payment", "trade_finance", "kyc", "compliance", "report"}
]

# Granted for the lifetime of an onboarding journey
ONBOARDING_TEMPORARY_PERMISSIONS: list[Permission] = [
    Permission.ORG_VIEW,
    Permission.PROFILE_EDIT,
    Permission.ONBOARDING_ACCESS,
]


def permission_values(permissions: list[Permission]) -> list[str]:
    return [p.value for p in permissions]


@dataclass(frozen=True)
class RoleTemplate:
    """Blueprint used to seed a role definition."""

    name: str
    display_name: str
    description: str
    level: RoleLevel
    category: RoleCategory
    permissions: list[Permission]
    is_default: bool = True
    is_system_role: bool = True
    entity_type: EntityType | None = None


DEFAULT_PLATFORM_ROLES: list[RoleTemplate] = [
    RoleTemplate(
        name="platform_super_admin",
        display_name="Platform Super Administrator",
        description="Full platform access with all administrative privileges",
        level=RoleLevel.PLATFORM,
        category=RoleCategory.SYSTEM,
        permissions=list(PLATFORM_PERMISSIONS),
    ),
    RoleTemplate(
        name="platform_admin",
        display_name="Platform Administrator",
        description="Platform administration with limited system access",
        level=RoleLevel.PLATFORM,
        category=RoleCategory.ADMIN,
        permissions=[
            Permission.PLATFORM_USER_MANAGE,
            Permission.PLATFORM_ORG_MANAGE,
            Permission.PLATFORM_ROLE_MANAGE,
            Permission.PLATFORM_MONITORING,
            Permission.PLATFORM_AUDIT,
            Permission.PLATFORM_SUPPORT,
            Permission.PLATFORM_TENANT_CONFIGURE,
            Permission.PLATFORM_REPORTS,
        ],
    ),
    RoleTemplate(
        name="platform_support",
        display_name="Platform Support",
        description="Platform support with read-only access and user assistance",
        level=RoleLevel.PLATFORM,
        category=RoleCategory.USER,
        permissions=[Permission.PLATFORM_SUPPORT, Permission.PLATFORM_MONITORING],
    ),
]


def _business_subset(*markers: str) -> list[Permission]:
    return [p for p in BUSINESS_PERMISSIONS if any(m in p.value for m in markers)]


DEFAULT_ORGANIZATION_ROLES: list[RoleTemplate] = [
    RoleTemplate(
        name="organization_super_admin",
        display_name="Organization Super Administrator",
        description="Complete organization management with all privileges",
        level=RoleLevel.ORGANIZATION_SUPER,
        category=RoleCategory.ADMIN,
        permissions=[*ORGANIZATION_PERMISSIONS, *BUSINESS_PERMISSIONS],
    ),
    RoleTemplate(
        name="organization_admin",
        display_name="Organization Administrator",
        description="Organization administration with user and role management",
        level=RoleLevel.ORGANIZATION_ADMIN,
        category=RoleCategory.ADMIN,
        permissions=[
            Permission.ORG_SETTINGS,
            Permission.ORG_USER_CREATE,
            Permission.ORG_USER_MANAGE,
            Permission.ORG_USER_VIEW,
            Permission.ORG_ROLE_ASSIGN,
            Permission.ORG_ROLE_MANAGE,
            Permission.ORG_REPORTS_VIEW,
            Permission.ORG_ANALYTICS_VIEW,
            *_business_subset(":view", ":manage", ":create"),
        ],
    ),
    RoleTemplate(
        name="organization_manager",
        display_name="Organization Manager",
        description="Department or team management with limited admin access",
        level=RoleLevel.ORGANIZATION_STANDARD,
        category=RoleCategory.MANAGER,
        permissions=[
            Permission.ORG_USER_VIEW,
            Permission.ORG_REPORTS_VIEW,
            Permission.LC_CREATE,
            Permission.LC_VIEW,
            Permission.LC_EDIT,
            Permission.LC_APPROVE,
            Permission.DOCUMENT_VIEW,
            Permission.DOCUMENT_VERIFY,
            Permission.PAYMENT_VIEW,
            Permission.PAYMENT_APPROVE,
            Permission.REPORT_VIEW,
            Permission.REPORT_CREATE,
        ],
    ),
    RoleTemplate(
        name="organization_user",
        display_name="Organization User",
        description="Standard user with basic operational permissions",
        level=RoleLevel.ORGANIZATION_STANDARD,
        category=RoleCategory.USER,
        permissions=[
            Permission.LC_VIEW,
            Permission.LC_CREATE,
            Permission.DOCUMENT_UPLOAD,
            Permission.DOCUMENT_VIEW,
            Permission.DOCUMENT_DOWNLOAD,
            Permission.PAYMENT_VIEW,
            Permission.REPORT_VIEW,
        ],
    ),
    RoleTemplate(
        name="organization_viewer",
        display_name="Organization Viewer",
        description="Read-only access for viewing and reporting",
        level=RoleLevel.ORGANIZATION_STANDARD,
        category=RoleCategory.VIEWER,
        permissions=[
            Permission.LC_VIEW,
            Permission.DOCUMENT_VIEW,
            Permission.PAYMENT_VIEW,
            Permission.REPORT_VIEW,
        ],
    ),
]


def _entity_role(
    entity_type: EntityType,
    name: str,
    display_name: str,
    description: str,
    category: RoleCategory,
    permissions: list[Permission],
) -> RoleTemplate:
    return RoleTemplate(
        name=name,
        display_name=display_name,
        description=description,
        level=RoleLevel.ENTITY_SPECIFIC,
        category=category,
        permissions=permissions,
        is_system_role=False,
        entity_type=entity_type,
    )


ENTITY_ROLE_TEMPLATES: dict[EntityType, list[RoleTemplate]] = {
    EntityType.BANK: [
        _entity_role(
            EntityType.BANK,
            "bank_admin",
            "Bank Administrator",
            "Bank-specific administrative operations and compliance",
            RoleCategory.ADMIN,
            [
                Permission.LC_CREATE,
                Permission.LC_VIEW_ALL,
                Permission.LC_APPROVE,
                Permission.LC_REJECT,
                Permission.PAYMENT_PROCESS,
                Permission.PAYMENT_RECONCILE,
                Permission.KYC_VERIFY,
                Permission.COMPLIANCE_MANAGE,
                Permission.REPORT_ADMIN,
            ],
        ),
        _entity_role(
            EntityType.BANK,
            "bank_officer",
            "Bank Officer",
            "Bank operations and customer service",
            RoleCategory.USER,
            [
                Permission.LC_CREATE,
                Permission.LC_VIEW,
                Permission.LC_EDIT,
                Permission.DOCUMENT_VERIFY,
                Permission.PAYMENT_VIEW,
                Permission.KYC_VIEW,
                Permission.REPORT_VIEW,
            ],
        ),
    ],
    EntityType.CORPORATE: [
        _entity_role(
            EntityType.CORPORATE,
            "corporate_admin",
            "Corporate Administrator",
            "Corporate trade finance operations management",
            RoleCategory.ADMIN,
            [
                Permission.LC_VIEW,
                Permission.LC_CREATE,
                Permission.DOCUMENT_MANAGE,
                Permission.PAYMENT_VIEW,
                Permission.TRADE_FINANCE_MANAGE,
                Permission.REPORT_CREATE,
            ],
        ),
        _entity_role(
            EntityType.CORPORATE,
            "corporate_manager",
            "Corporate Manager",
            "Corporate department management and approvals",
            RoleCategory.MANAGER,
            [
                Permission.LC_VIEW,
                Permission.LC_APPROVE,
                Permission.DOCUMENT_VIEW,
                Permission.PAYMENT_APPROVE,
                Permission.REPORT_VIEW,
            ],
        ),
        _entity_role(
            EntityType.CORPORATE,
            "corporate_user",
            "Corporate User",
            "Corporate trade documentation and tracking",
            RoleCategory.USER,
            [
                Permission.LC_VIEW,
                Permission.DOCUMENT_UPLOAD,
                Permission.DOCUMENT_VIEW,
                Permission.DOCUMENT_DOWNLOAD,
                Permission.PAYMENT_VIEW,
            ],
        ),
    ],
    EntityType.NBFC: [
        _entity_role(
            EntityType.NBFC,
            "nbfc_admin",
            "NBFC Administrator",
            "Non-banking financial company operations",
            RoleCategory.ADMIN,
            [
                Permission.LC_VIEW,
                Permission.PAYMENT_INITIATE,
                Permission.PAYMENT_APPROVE,
                Permission.KYC_MANAGE,
                Permission.COMPLIANCE_VIEW,
                Permission.REPORT_EXPORT,
            ],
        ),
        _entity_role(
            EntityType.NBFC,
            "nbfc_user",
            "NBFC User",
            "Non-banking financial company operations staff",
            RoleCategory.USER,
            [
                Permission.LC_VIEW,
                Permission.DOCUMENT_VIEW,
                Permission.PAYMENT_VIEW,
                Permission.REPORT_VIEW,
            ],
        ),
    ],
    EntityType.LOGISTICS: [
        _entity_role(
            EntityType.LOGISTICS,
            "logistics_admin",
            "Logistics Administrator",
            "Logistics and shipping operations management",
            RoleCategory.ADMIN,
            [
                Permission.LC_VIEW,
                Permission.DOCUMENT_UPLOAD,
                Permission.DOCUMENT_MANAGE,
                Permission.TRADE_FINANCE_VIEW,
            ],
        ),
        _entity_role(
            EntityType.LOGISTICS,
            "logistics_user",
            "Logistics User",
            "Shipping document handling",
            RoleCategory.USER,
            [
                Permission.LC_VIEW,
                Permission.DOCUMENT_UPLOAD,
                Permission.DOCUMENT_VIEW,
            ],
        ),
    ],
    EntityType.INSURANCE: [
        _entity_role(
            EntityType.INSURANCE,
            "insurance_admin",
            "Insurance Administrator",
            "Insurance and risk management operations",
            RoleCategory.ADMIN,
            [
                Permission.LC_VIEW,
                Permission.DOCUMENT_VIEW,
                Permission.PAYMENT_VIEW,
                Permission.COMPLIANCE_VIEW,
                Permission.REPORT_VIEW,
            ],
        ),
        _entity_role(
            EntityType.INSURANCE,
            "insurance_user",
            "Insurance User",
            "Insurance policy and claims review",
            RoleCategory.USER,
            [
                Permission.LC_VIEW,
                Permission.DOCUMENT_VIEW,
                Permission.PAYMENT_VIEW,
            ],
        ),
    ],
}

WILDCARD = "*"


@dataclass(frozen=True)
class AssignmentRule:
    """Which role names a holder of ``source_role_name`` may grant."""

    source_role_name: str
    can_assign_roles: frozenset[str]
    can_manage_users: bool
    can_create_custom_roles: bool
    # Recorded for reporting; not enforced
    max_users_manageable: int | None = None
    requires_approval: bool = False
    approver_roles: tuple[str, ...] = field(default_factory=tuple)

    def allows(self, role_name: str) -> bool:
        return WILDCARD in self.can_assign_roles or role_name in self.can_assign_roles


_ORGANIZATION_TIER = frozenset(
    {
        "organization_super_admin",
        "organization_admin",
        "organization_manager",
        "organization_user",
        "organization_viewer",
    }
)
_ENTITY_ROLES = frozenset(
    template.name
    for templates in ENTITY_ROLE_TEMPLATES.values()
    for template in templates
)


def _entity_admin_rule(entity_type: EntityType) -> AssignmentRule:
    admin, *others = ENTITY_ROLE_TEMPLATES[entity_type]
    return AssignmentRule(
        source_role_name=admin.name,
        can_assign_roles=frozenset(t.name for t in others),
        can_manage_users=True,
        can_create_custom_roles=False,
    )


ROLE_ASSIGNMENT_RULES: list[AssignmentRule] = [
    AssignmentRule(
        source_role_name="platform_super_admin",
        can_assign_roles=frozenset({WILDCARD}),
        can_manage_users=True,
        can_create_custom_roles=True,
    ),
    AssignmentRule(
        source_role_name="platform_admin",
        can_assign_roles=_ORGANIZATION_TIER | {"platform_support"},
        can_manage_users=True,
        can_create_custom_roles=True,
    ),
    AssignmentRule(
        source_role_name="organization_super_admin",
        can_assign_roles=(_ORGANIZATION_TIER - {"organization_super_admin"})
        | _ENTITY_ROLES,
        can_manage_users=True,
        can_create_custom_roles=True,
    ),
    AssignmentRule(
        source_role_name="organization_admin",
        can_assign_roles=frozenset(
            {"organization_manager", "organization_user", "organization_viewer"}
        ),
        can_manage_users=True,
        can_create_custom_roles=False,
        max_users_manageable=100,
    ),
    AssignmentRule(
        source_role_name="organization_manager",
        can_assign_roles=frozenset({"organization_user", "organization_viewer"}),
        can_manage_users=True,
        can_create_custom_roles=False,
        max_users_manageable=25,
        requires_approval=True,
        approver_roles=("organization_admin", "organization_super_admin"),
    ),
    *(_entity_admin_rule(entity_type) for entity_type in EntityType),
    AssignmentRule(
        source_role_name="corporate_manager",
        can_assign_roles=frozenset({"corporate_user"}),
        can_manage_users=True,
        can_create_custom_roles=False,
    ),
]

ASSIGNMENT_RULES_BY_ROLE: dict[str, AssignmentRule] = {
    rule.source_role_name: rule for rule in ROLE_ASSIGNMENT_RULES
}


def get_assignment_rule(role_name: str) -> AssignmentRule | None:
    return ASSIGNMENT_RULES_BY_ROLE.get(role_name)
