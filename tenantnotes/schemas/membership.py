import enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any


class MemberRole(str, enum.Enum):
    admin = "admin"
    member = "member"

    @classmethod
    def coerce(cls, value: Any) -> "MemberRole":
        """Map any input to a role; only "admin" yields admin."""
        if value in (cls.admin, cls.admin.value):
            return cls.admin
        return cls.member


class Membership(BaseModel):
    """Link between a user email and a tenant, with a role."""
    model_config = ConfigDict(populate_by_name=True)

    user_email: str = Field(alias="userEmail")
    tenant_id: str = Field(alias="tenantId")
    role: MemberRole = MemberRole.member

    @field_validator("role", mode="before")
    @classmethod
    def coerce_role(cls, v):
        return MemberRole.coerce(v)
