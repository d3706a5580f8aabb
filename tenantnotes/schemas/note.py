from pydantic import BaseModel, ConfigDict, Field


class Note(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    tenant_id: str = Field(alias="tenantId")
    author_email: str = Field(alias="authorEmail")
    title: str
    content: str
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
