"""Assignment and submission schema definitions."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from eduhub.models.enums import AssignmentStatus, SubmissionStatus
from eduhub.schemas.user import UserInfo


class AssignmentInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    module_id: str
    title: str
    description: Optional[str] = None
    due_date: datetime
    status: AssignmentStatus
    created_at: str
    updated_at: str


class SubmissionInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    assignment_id: int
    user_id: str = Field(description="The submitting student.")
    submission_text: str
    status: SubmissionStatus
    grade: Optional[int] = Field(default=None, description="0-100, set once graded.")
    feedback: Optional[str] = None
    submitted_at: datetime
    graded_at: Optional[datetime] = None


class SubmissionDetail(SubmissionInfo):
    """Submission with its student, used for a teacher's grading list."""

    student: Optional[UserInfo] = None
