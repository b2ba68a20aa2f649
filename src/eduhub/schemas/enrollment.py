"""Enrollment schema definitions.

Plain-data views of enrollment rows for a presentation layer.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from eduhub.core.exceptions import EnrollmentRejectedError
from eduhub.models.enums import EnrollmentStatus
from eduhub.schemas.module import ModuleInfo
from eduhub.schemas.user import UserInfo


class EnrollmentInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str = Field(description="The enrolled student.")
    module_id: str
    status: EnrollmentStatus
    start_date: datetime
    completion_date: Optional[datetime] = Field(
        default=None, description="Set once the enrollment leaves IN_PROGRESS."
    )


class EnrollmentDetail(EnrollmentInfo):
    """Enrollment together with its student and module, used for listings."""

    student: Optional[UserInfo] = None
    module: Optional[ModuleInfo] = None


class EnrollmentRejection(BaseModel):
    """User-facing explanation of a refused enrollment."""

    reason: str
    message: str

    @classmethod
    def from_error(cls, exc: EnrollmentRejectedError) -> "EnrollmentRejection":
        return cls(reason=exc.reason.name, message=exc.reason.value)
