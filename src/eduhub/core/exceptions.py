"""Custom exception classes for EduHub.

This module defines application-specific exceptions following Google Python
Style Guide.
"""

from enum import Enum


class EduHubError(Exception):
    """Base exception for all EduHub errors."""

    pass


class RejectionReason(str, Enum):
    """Business-rule reasons for refusing an enrollment.

    Values are display messages, surfaced verbatim to the user.
    """

    MODULE_ARCHIVED = "module archived"
    ALREADY_ENROLLED = "already enrolled"
    STUDENT_AT_CAPACITY = "student at max active enrollments"
    MODULE_AT_CAPACITY = "module at max capacity"


class EnrollmentRejectedError(EduHubError):
    """Raised when an enrollment request violates a business rule."""

    def __init__(self, reason: RejectionReason):
        """Initialize the exception.

        Args:
            reason: The first business rule that failed.
        """
        self.reason = reason
        super().__init__(reason.value)


class ValidationError(EduHubError):
    """Raised when data validation fails."""

    pass


class InvalidEnrollmentStatusError(ValidationError):
    """Raised when an enrollment status value is not allowed."""

    def __init__(self, status: object):
        self.status = status
        super().__init__(f"Invalid enrollment status: {status!r}")


class InvalidRoleError(ValidationError):
    """Raised when a role value is not one of the known roles."""

    def __init__(self, role: object):
        self.role = role
        super().__init__(f"Invalid role: {role!r}")


class UserNotFoundError(EduHubError):
    """Raised when a requested user cannot be found."""

    def __init__(self, user_id: str):
        """Initialize the exception.

        Args:
            user_id: The ID of the user that was not found.
        """
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")


class UserAlreadyExistsError(EduHubError):
    """Raised when trying to create a user that already exists."""

    pass


class LearningModuleNotFoundError(EduHubError):
    """Raised when a requested module cannot be found."""

    def __init__(self, module_id: str):
        """Initialize the exception.

        Args:
            module_id: The ID of the module that was not found.
        """
        self.module_id = module_id
        super().__init__(f"Module '{module_id}' not found")


class EnrollmentNotFoundError(EduHubError):
    """Raised when a requested enrollment cannot be found."""

    def __init__(self, enrollment_id: int):
        """Initialize the exception.

        Args:
            enrollment_id: The ID of the enrollment that was not found.
        """
        self.enrollment_id = enrollment_id
        super().__init__(f"Enrollment '{enrollment_id}' not found")


class AssignmentNotFoundError(EduHubError):
    """Raised when a requested assignment cannot be found."""

    def __init__(self, assignment_id: int):
        self.assignment_id = assignment_id
        super().__init__(f"Assignment '{assignment_id}' not found")


class SubmissionNotFoundError(EduHubError):
    """Raised when a requested submission cannot be found."""

    def __init__(self, submission_id: int):
        self.submission_id = submission_id
        super().__init__(f"Submission '{submission_id}' not found")


class PermissionDeniedError(EduHubError):
    """Raised when an administrative action is not allowed for the target."""

    pass
