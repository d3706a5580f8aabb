import enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

FREE_PLAN_NOTE_LIMIT = 3


class Plan(str, enum.Enum):
    free = "free"
    pro = "pro"


class Tenant(BaseModel):
    """Organization (team) record as stored in the tenants collection."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    plan: Plan = Plan.free
    created_at: str = Field(alias="createdAt")
    invite_code: Optional[str] = Field(None, alias="inviteCode")
    owner_email: Optional[str] = Field(None, alias="ownerEmail")

    @field_validator("plan", mode="before")
    @classmethod
    def default_unknown_plan(cls, v):
        # Anything other than pro is treated as the free plan
        return Plan.pro if v in (Plan.pro, Plan.pro.value) else Plan.free

    @property
    def is_free(self) -> bool:
        return self.plan != Plan.pro
