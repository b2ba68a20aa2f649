"""User schema definitions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from eduhub.models.enums import Role


class UserInfo(BaseModel):
    """Public user fields; never carries credentials."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    username: str
    display_name: Optional[str] = None
    email: Optional[str] = None
    role: Role
    create_at: str
