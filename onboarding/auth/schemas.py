"""Pydantic schemas for authenticated identities."""

from pydantic import BaseModel, ConfigDict, Field

from .permissions import AccountType, AdminScope, StaffRole


class LearnerIdentity(BaseModel):
    """Identity decoded from the access token.

    `learner_id` is the stable identifier the external login service uses
    (the staff member's email / login id).
    """

    model_config = ConfigDict(frozen=True)

    learner_id: str = Field(..., min_length=1, description="Login id (email)")
    role: StaffRole
    account_type: AccountType = AccountType.NEW
    admin_scope: AdminScope | None = None
    name: str = ""
    school_id: str | None = None

    @property
    def is_admin(self) -> bool:
        """Admin accounts carry an admin scope."""
        return self.admin_scope is not None
