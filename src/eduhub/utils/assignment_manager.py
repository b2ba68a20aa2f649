"""Assignment management utilities.

Teachers publish assignments inside the modules they own; students enrolled in
a module hand in a text submission per assignment, which the owning teacher
grades on a 0-100 scale. File uploads are handled outside this package.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from eduhub.core.exceptions import (
    AssignmentNotFoundError,
    LearningModuleNotFoundError,
    PermissionDeniedError,
    SubmissionNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from eduhub.models.assignment import TITLE_MAX_LENGTH, AssignmentModel, SubmissionModel
from eduhub.models.enrollment import EnrollmentModel
from eduhub.models.enums import AssignmentStatus, Role, SubmissionStatus
from eduhub.models.module import ModuleModel
from eduhub.models.user import UserModel

logger = logging.getLogger(__name__)

DUE_DATE_FORMAT = "%Y-%m-%d %H:%M"
MIN_GRADE = 0
MAX_GRADE = 100

DateLike = Union[datetime, str]
AssignmentStatusLike = Union[AssignmentStatus, str]


def _parse_due_date(value: DateLike) -> datetime:
    """Normalize a due date to an aware UTC datetime in the future.

    Strings use the "YYYY-MM-DD HH:MM" form; naive values are taken as UTC.
    """
    if isinstance(value, str):
        try:
            value = datetime.strptime(value, DUE_DATE_FORMAT)
        except ValueError:
            raise ValidationError(
                f"Due date must use the format YYYY-MM-DD HH:MM, got {value!r}"
            ) from None
    if not isinstance(value, datetime):
        raise ValidationError("Due date is required.")
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    else:
        value = value.astimezone(pytz.utc)
    if value <= datetime.now(pytz.utc):
        raise ValidationError("Due date must be in the future.")
    return value


def _parse_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("Assignment title cannot be empty.")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Assignment title exceeds {TITLE_MAX_LENGTH} characters.")
    return title


def _parse_status(status: AssignmentStatusLike) -> AssignmentStatus:
    try:
        return AssignmentStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid assignment status: {status!r}") from None


class AssignmentManager:
    """Manages assignments, student submissions, and grading."""

    def __init__(self, db: Session):
        """Initialize AssignmentManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    @staticmethod
    def can_manage(actor: UserModel, module: ModuleModel) -> bool:
        """Admins manage every module's assignments; teachers only their own."""
        if actor.role == Role.ADMIN:
            return True
        return actor.role == Role.TEACHER and module.teacher_id == actor.user_id

    def _require_manager(self, actor: UserModel, module: ModuleModel) -> None:
        if not self.can_manage(actor, module):
            raise PermissionDeniedError(
                f"User '{actor.user_id}' does not teach module '{module.module_id}'."
            )

    # --- Assignments ---

    def create_assignment(
        self,
        actor: UserModel,
        module_id: str,
        title: str,
        due_date: DateLike,
        description: Optional[str] = None,
        status: AssignmentStatusLike = AssignmentStatus.DRAFT,
    ) -> AssignmentModel:
        """Create an assignment in a module.

        Args:
            actor: Admin or the module's teacher.
            module_id: Module the assignment belongs to.
            title: Non-blank title, at most 255 characters.
            due_date: Future deadline, a datetime or "YYYY-MM-DD HH:MM" (UTC).
            description: Optional free text.
            status: DRAFT, PUBLISHED, or CLOSED.

        Returns:
            The created assignment.

        Raises:
            LearningModuleNotFoundError: If the module does not exist.
            PermissionDeniedError: If the actor may not manage the module.
            ValidationError: If title, due date, or status is invalid.
        """
        module = self.db.query(ModuleModel).filter(ModuleModel.module_id == module_id).first()
        if not module:
            raise LearningModuleNotFoundError(module_id)
        self._require_manager(actor, module)

        now = datetime.now(pytz.utc).isoformat()
        model = AssignmentModel(
            module_id=module_id,
            title=_parse_title(title),
            description=description,
            due_date=_parse_due_date(due_date),
            status=_parse_status(status),
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Created assignment %s in module %s (%s)", model.id, module_id, model.status.value
        )
        return model

    def get_assignment(self, assignment_id: int) -> AssignmentModel:
        model = (
            self.db.query(AssignmentModel)
            .filter(AssignmentModel.id == assignment_id)
            .first()
        )
        if not model:
            raise AssignmentNotFoundError(assignment_id)
        return model

    def list_for_module(
        self, module_id: str, status: Optional[AssignmentStatusLike] = None
    ) -> List[AssignmentModel]:
        query = self.db.query(AssignmentModel).filter(AssignmentModel.module_id == module_id)
        if status is not None:
            query = query.filter(AssignmentModel.status == _parse_status(status))
        return query.order_by(AssignmentModel.due_date, AssignmentModel.id).all()

    def update_assignment(
        self,
        actor: UserModel,
        assignment_id: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[DateLike] = None,
        status: Optional[AssignmentStatusLike] = None,
    ) -> AssignmentModel:
        """Update the given fields of an assignment; None leaves a field as is.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist.
            PermissionDeniedError: If the actor may not manage its module.
            ValidationError: If a new value is invalid. Nothing is written.
        """
        model = self.get_assignment(assignment_id)
        self._require_manager(actor, model.module)

        changes = {}
        if title is not None:
            changes["title"] = _parse_title(title)
        if description is not None:
            changes["description"] = description
        if due_date is not None:
            changes["due_date"] = _parse_due_date(due_date)
        if status is not None:
            changes["status"] = _parse_status(status)

        for field, value in changes.items():
            setattr(model, field, value)
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Updated assignment %s: %s", assignment_id, ", ".join(sorted(changes)))
        return model

    def delete_assignment(self, actor: UserModel, assignment_id: int) -> None:
        """Delete an assignment together with its submissions.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist.
            PermissionDeniedError: If the actor may not manage its module.
        """
        model = self.get_assignment(assignment_id)
        self._require_manager(actor, model.module)
        self.db.delete(model)
        self.db.commit()
        logger.info("Deleted assignment %s (by %s)", assignment_id, actor.user_id)

    # --- Submissions ---

    def find_submission(self, assignment_id: int, student_id: str) -> Optional[SubmissionModel]:
        return (
            self.db.query(SubmissionModel)
            .filter(
                SubmissionModel.assignment_id == assignment_id,
                SubmissionModel.user_id == student_id,
            )
            .first()
        )

    def get_submission(self, submission_id: int) -> SubmissionModel:
        model = (
            self.db.query(SubmissionModel)
            .filter(SubmissionModel.id == submission_id)
            .first()
        )
        if not model:
            raise SubmissionNotFoundError(submission_id)
        return model

    def list_submissions(self, assignment_id: int) -> List[SubmissionModel]:
        return (
            self.db.query(SubmissionModel)
            .options(joinedload(SubmissionModel.student))
            .filter(SubmissionModel.assignment_id == assignment_id)
            .order_by(SubmissionModel.submitted_at, SubmissionModel.id)
            .all()
        )

    def submit(
        self, student_id: str, assignment_id: int, submission_text: str
    ) -> SubmissionModel:
        """Hand in, or replace, a student's answer to an assignment.

        A repeated submission overwrites the stored text and submission time.
        Any grade already given is kept.

        Args:
            student_id: Submitting user; must hold an enrollment in the module.
            assignment_id: Assignment being answered.
            submission_text: Non-blank answer text.

        Returns:
            The stored submission.

        Raises:
            AssignmentNotFoundError: If the assignment does not exist.
            UserNotFoundError: If the student does not exist.
            PermissionDeniedError: If the student is not enrolled in the module.
            ValidationError: If the text is blank.
        """
        assignment = self.get_assignment(assignment_id)
        student = self.db.query(UserModel).filter(UserModel.user_id == student_id).first()
        if not student:
            raise UserNotFoundError(student_id)
        enrolled = (
            self.db.query(EnrollmentModel.id)
            .filter(
                EnrollmentModel.user_id == student_id,
                EnrollmentModel.module_id == assignment.module_id,
            )
            .first()
            is not None
        )
        if not enrolled:
            raise PermissionDeniedError("Not enrolled in this module.")
        if not (submission_text or "").strip():
            raise ValidationError("Submission text cannot be empty.")

        now = datetime.now(pytz.utc)
        submission = self.find_submission(assignment_id, student_id)
        if submission is None:
            # A concurrent first submission by the same student wins the unique
            # constraint; fall back to overwriting it.
            try:
                with self.db.begin_nested():
                    submission = SubmissionModel(
                        assignment_id=assignment_id,
                        user_id=student_id,
                        submission_text=submission_text,
                        status=SubmissionStatus.SUBMITTED,
                        submitted_at=now,
                    )
                    self.db.add(submission)
                    self.db.flush()
            except IntegrityError:
                submission = self.find_submission(assignment_id, student_id)
        submission.submission_text = submission_text
        submission.submitted_at = now
        self.db.commit()
        self.db.refresh(submission)
        logger.info("User %s submitted assignment %s", student_id, assignment_id)
        return submission

    def grade_submission(
        self,
        actor: UserModel,
        submission_id: int,
        grade: int,
        feedback: Optional[str] = None,
    ) -> SubmissionModel:
        """Grade a submission on a 0-100 scale.

        Raises:
            SubmissionNotFoundError: If the submission does not exist.
            PermissionDeniedError: If the actor may not manage the module.
            ValidationError: If grade is not an integer between 0 and 100.
        """
        submission = self.get_submission(submission_id)
        self._require_manager(actor, submission.assignment.module)
        if isinstance(grade, bool) or not isinstance(grade, int):
            raise ValidationError(f"Grade must be an integer, got {grade!r}")
        if not MIN_GRADE <= grade <= MAX_GRADE:
            raise ValidationError(f"Grade must be between {MIN_GRADE} and {MAX_GRADE}.")

        submission.grade = grade
        submission.feedback = feedback
        submission.status = SubmissionStatus.GRADED
        submission.graded_at = datetime.now(pytz.utc)
        self.db.commit()
        self.db.refresh(submission)
        logger.info(
            "Submission %s graded %d by %s", submission_id, grade, actor.user_id
        )
        return submission
