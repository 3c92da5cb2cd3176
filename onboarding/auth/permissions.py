"""Staff roles and administrative scopes.

Every training module belongs to exactly one staff role, and learners only see
the curriculum of their own role. Administrators carry an admin scope:

- ALL: HR / super admin, sees and manages every role
- <role>: department head, sees and manages a single role
"""

from enum import Enum


class StaffRole(str, Enum):
    """Staff roles a curriculum can be written for."""

    TEACHER = "TEACHER"
    ACCOUNTANT = "ACCOUNTANT"
    CLEANING_STAFF = "CLEANING_STAFF"
    SECURITY = "SECURITY"
    PRINCIPAL = "PRINCIPAL"
    ADMIN = "ADMIN"
    OTHER = "OTHER"


class AccountType(str, Enum):
    """Portal a staff account signs into."""

    NEW = "NEW"  # New joining portal
    REFRESHER = "REFRESHER"  # Refresher portal for existing staff


class AdminScope(str, Enum):
    """Administrative reach of an admin account."""

    ALL = "ALL"
    TEACHER = "TEACHER"
    ACCOUNTANT = "ACCOUNTANT"
    CLEANING_STAFF = "CLEANING_STAFF"
    SECURITY = "SECURITY"
    PRINCIPAL = "PRINCIPAL"
    ADMIN = "ADMIN"
    OTHER = "OTHER"


def scoped_role(scope: AdminScope) -> StaffRole | None:
    """Return the single role a department head manages, None for HR.

    Examples:
        >>> scoped_role(AdminScope.ALL) is None
        True
        >>> scoped_role(AdminScope.SECURITY)
        <StaffRole.SECURITY: 'SECURITY'>
    """
    match scope:
        case AdminScope.ALL:
            return None
        case AdminScope.TEACHER:
            return StaffRole.TEACHER
        case AdminScope.ACCOUNTANT:
            return StaffRole.ACCOUNTANT
        case AdminScope.CLEANING_STAFF:
            return StaffRole.CLEANING_STAFF
        case AdminScope.SECURITY:
            return StaffRole.SECURITY
        case AdminScope.PRINCIPAL:
            return StaffRole.PRINCIPAL
        case AdminScope.ADMIN:
            return StaffRole.ADMIN
        case AdminScope.OTHER:
            return StaffRole.OTHER


def can_manage_role(scope: AdminScope, role: StaffRole) -> bool:
    """Check if an admin scope covers a staff role."""
    managed = scoped_role(scope)
    return managed is None or managed == role


def visible_roles(scope: AdminScope) -> list[StaffRole]:
    """Roles whose curriculum and progress an admin scope may see."""
    managed = scoped_role(scope)
    if managed is None:
        return list(StaffRole)
    return [managed]


def is_hr(scope: AdminScope | None) -> bool:
    """Check if scope is the organisation-wide HR scope."""
    return scope == AdminScope.ALL
