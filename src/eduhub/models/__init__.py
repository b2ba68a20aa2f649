"""SQLAlchemy models; importing this package registers every table on Base."""

from .assignment import AssignmentModel, SubmissionModel
from .base import Base
from .enrollment import EnrollmentModel
from .enums import AssignmentStatus, EnrollmentStatus, Role, SubmissionStatus
from .module import ModuleModel
from .user import UserModel

__all__ = [
    "AssignmentModel",
    "AssignmentStatus",
    "Base",
    "EnrollmentModel",
    "EnrollmentStatus",
    "ModuleModel",
    "Role",
    "SubmissionModel",
    "SubmissionStatus",
    "UserModel",
]
