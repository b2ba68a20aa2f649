from typing import Optional

from pydantic import BaseModel, ConfigDict


class ModuleInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    module_id: str
    name: str
    description: Optional[str] = None
    is_active: bool
    teacher_id: Optional[str] = None
    created_at: str
    updated_at: str


class ModuleOverview(BaseModel):
    """Admin listing row for a module."""

    module_id: str
    name: str
    description: Optional[str] = None
    teacher_name: str
    teacher_email: Optional[str] = None
    student_count: int
    is_active: bool
    created_at: str
