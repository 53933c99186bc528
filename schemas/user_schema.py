from datetime import datetime
from pydantic import BaseModel


class UserResponse(BaseModel):
    """Outbound user representation; the password hash has no field here."""

    id: int
    username: str
    email: str
    created_at: datetime | None = None

    model_config = {
        "from_attributes": True,
    }
