from typing import TYPE_CHECKING, Optional
from pydantic import BaseModel, field_validator
from tenantnotes.schemas.membership import MemberRole

if TYPE_CHECKING:
    from tenantnotes.services.tenant_store import TenantStore


def normalize_email(email: Optional[str]) -> str:
    """Lower-case an email identity; None becomes an empty string."""
    return (email or "").lower()


class ActingUser(BaseModel):
    """
    Authenticated user resolved by the authentication module.

    The data layer never validates credentials; it only receives the
    resolved email and the account-level role.
    """
    email: str
    role: MemberRole = MemberRole.member

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return normalize_email(v)

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, v):
        return MemberRole.coerce(v)


def is_tenant_admin(store: "TenantStore", user: ActingUser, tenant_id: str) -> bool:
    """
    Check whether the acting user holds the admin role on a tenant.

    Callers decide whether to act on this; the store itself does not
    enforce roles.

    Args:
        store: Tenant store to look the membership up in
        user: Acting user from the authentication module
        tenant_id: Tenant to check

    Returns:
        True if a membership with role admin exists
    """
    membership = store.get_membership_for_tenant(user.email, tenant_id)
    return membership is not None and membership.role == MemberRole.admin
