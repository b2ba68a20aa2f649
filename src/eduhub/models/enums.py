"""Closed sets of account roles and enrollment statuses."""

from enum import Enum


class Role(str, Enum):
    """Single active role of a user account."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    OLD_STUDENT = "OLD_STUDENT"


class EnrollmentStatus(str, Enum):
    """Lifecycle status of an enrollment."""

    IN_PROGRESS = "IN_PROGRESS"
    PASS = "PASS"
    FAIL = "FAIL"


RESOLVED_STATUSES = (EnrollmentStatus.PASS, EnrollmentStatus.FAIL)


class AssignmentStatus(str, Enum):
    """Publication state of an assignment."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CLOSED = "CLOSED"


class SubmissionStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    GRADED = "GRADED"
