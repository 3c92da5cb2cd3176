"""Staff identity: roles, admin scopes and access tokens."""

from .permissions import AccountType, AdminScope, StaffRole
from .schemas import LearnerIdentity


__all__ = [
    "AccountType",
    "AdminScope",
    "LearnerIdentity",
    "StaffRole",
]
