from datetime import datetime
from typing import Any

from pydantic import BaseModel


class ProjectRequest(BaseModel):
    """Body of create and update; update replaces all three fields."""

    name: str
    description: str | None = ""
    file_id: str


class ProjectResponse(BaseModel):
    id: int
    name: str
    description: str | None = ""
    file_id: str
    user_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ObjectPropertiesResponse(BaseModel):
    message: str
    object_id: str
    properties: dict[str, Any]
