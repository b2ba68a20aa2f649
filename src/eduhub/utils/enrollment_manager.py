"""Enrollment management utilities.

This module implements admission control for new enrollments and the status
writes that resolve them. Every status change is followed, in the same
transaction, by a role reconciliation for the owning student.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Union

import pytz
from sqlalchemy import distinct, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from eduhub.config import MAX_ENROLLMENTS_PER_STUDENT, MAX_STUDENTS_PER_MODULE
from eduhub.core.exceptions import (
    EnrollmentNotFoundError,
    EnrollmentRejectedError,
    InvalidEnrollmentStatusError,
    LearningModuleNotFoundError,
    RejectionReason,
    UserNotFoundError,
)
from eduhub.models.enrollment import EnrollmentModel
from eduhub.models.enums import RESOLVED_STATUSES, EnrollmentStatus, Role
from eduhub.models.module import ModuleModel
from eduhub.models.user import UserModel
from eduhub.utils.role_transition import RoleTransitionEngine

logger = logging.getLogger(__name__)

StatusLike = Union[EnrollmentStatus, str]


def _coerce_status(status: StatusLike, allowed: Iterable[EnrollmentStatus]) -> EnrollmentStatus:
    try:
        value = EnrollmentStatus(status)
    except ValueError:
        raise InvalidEnrollmentStatusError(status) from None
    if value not in allowed:
        raise InvalidEnrollmentStatusError(status)
    return value


class EnrollmentManager:
    """Manages enrollment admission, resolution, and queries."""

    def __init__(
        self,
        db: Session,
        role_transitions: Optional[RoleTransitionEngine] = None,
        max_enrollments_per_student: int = MAX_ENROLLMENTS_PER_STUDENT,
        max_students_per_module: int = MAX_STUDENTS_PER_MODULE,
    ):
        """Initialize EnrollmentManager.

        Args:
            db: SQLAlchemy Session.
            role_transitions: Engine notified after every status change.
                Defaults to one bound to the same session.
            max_enrollments_per_student: Active enrollment limit per student.
            max_students_per_module: Active student limit per module.
        """
        self.db = db
        self.role_transitions = role_transitions or RoleTransitionEngine(db)
        self.max_enrollments_per_student = max_enrollments_per_student
        self.max_students_per_module = max_students_per_module

    # --- Admission control ---

    def count_active_for_student(self, student_id: str) -> int:
        return (
            self.db.query(func.count(EnrollmentModel.id))
            .filter(
                EnrollmentModel.user_id == student_id,
                EnrollmentModel.status == EnrollmentStatus.IN_PROGRESS,
            )
            .scalar()
        )

    def count_active_students_in_module(self, module_id: str) -> int:
        return (
            self.db.query(func.count(distinct(EnrollmentModel.user_id)))
            .filter(
                EnrollmentModel.module_id == module_id,
                EnrollmentModel.status == EnrollmentStatus.IN_PROGRESS,
            )
            .scalar()
        )

    def find(self, student_id: str, module_id: str) -> Optional[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .filter(
                EnrollmentModel.user_id == student_id,
                EnrollmentModel.module_id == module_id,
            )
            .first()
        )

    def evaluate_admission(
        self, student_id: str, module: ModuleModel
    ) -> Optional[RejectionReason]:
        """Run the admission rules in order and report the first violation.

        Args:
            student_id: Student requesting enrollment.
            module: Target module.

        Returns:
            The first failing rule, or None if the student may enroll.
        """
        if not module.is_active:
            return RejectionReason.MODULE_ARCHIVED
        if self.find(student_id, module.module_id) is not None:
            return RejectionReason.ALREADY_ENROLLED
        if self.count_active_for_student(student_id) >= self.max_enrollments_per_student:
            return RejectionReason.STUDENT_AT_CAPACITY
        if self.count_active_students_in_module(module.module_id) >= self.max_students_per_module:
            return RejectionReason.MODULE_AT_CAPACITY
        return None

    def enroll(self, student_id: str, module_id: str) -> EnrollmentModel:
        """Enroll a student in a module.

        Args:
            student_id: Student to enroll.
            module_id: Module to enroll into.

        Returns:
            The new IN_PROGRESS enrollment.

        Raises:
            UserNotFoundError: If the student does not exist.
            LearningModuleNotFoundError: If the module does not exist.
            EnrollmentRejectedError: If a business rule refuses the enrollment.
                Only the work done by this call is undone; other pending
                changes on the session are kept.
        """
        try:
            with self.db.begin_nested():
                enrollment = self._admit(student_id, module_id)
        except IntegrityError as exc:
            logger.info(
                "Rejected enrollment of %s in %s: concurrent duplicate", student_id, module_id
            )
            raise EnrollmentRejectedError(RejectionReason.ALREADY_ENROLLED) from exc
        self.db.commit()
        self.db.refresh(enrollment)
        logger.info(
            "Enrolled %s in %s (enrollment %s)", student_id, module_id, enrollment.id
        )
        return enrollment

    def _admit(self, student_id: str, module_id: str) -> EnrollmentModel:
        # Lock order is student, then module. The student lock serializes
        # admissions competing for the same student's last slot; the module
        # lock serializes admissions competing for the same module seat.
        student = (
            self.db.query(UserModel)
            .filter(UserModel.user_id == student_id)
            .with_for_update()
            .first()
        )
        if not student:
            raise UserNotFoundError(student_id)

        module = (
            self.db.query(ModuleModel)
            .filter(ModuleModel.module_id == module_id)
            .with_for_update()
            .first()
        )
        if not module:
            raise LearningModuleNotFoundError(module_id)

        reason = self.evaluate_admission(student_id, module)
        if reason is not None:
            logger.info(
                "Rejected enrollment of %s in %s: %s", student_id, module_id, reason.value
            )
            raise EnrollmentRejectedError(reason)

        enrollment = EnrollmentModel(
            user_id=student_id,
            module_id=module_id,
            status=EnrollmentStatus.IN_PROGRESS,
            start_date=datetime.now(pytz.utc),
            completion_date=None,
        )
        self.db.add(enrollment)
        self.db.flush()
        return enrollment

    # --- Status writes ---

    def get(self, enrollment_id: int) -> EnrollmentModel:
        model = (
            self.db.query(EnrollmentModel)
            .filter(EnrollmentModel.id == enrollment_id)
            .first()
        )
        if not model:
            raise EnrollmentNotFoundError(enrollment_id)
        return model

    def complete(self, enrollment_id: int, status: StatusLike) -> EnrollmentModel:
        """Resolve an enrollment as PASS or FAIL.

        Authorization is the caller's job; see `can_manage`.

        Args:
            enrollment_id: Enrollment to resolve.
            status: PASS or FAIL.

        Returns:
            The updated enrollment.

        Raises:
            InvalidEnrollmentStatusError: If status is not PASS or FAIL. The
                stored enrollment is left unchanged.
            EnrollmentNotFoundError: If the enrollment does not exist.
        """
        value = _coerce_status(status, RESOLVED_STATUSES)
        return self._write_status(self.get(enrollment_id), value)

    def set_status(self, enrollment_id: int, status: StatusLike) -> EnrollmentModel:
        """Override an enrollment's status, including a reset to IN_PROGRESS.

        A reset clears the completion date. It never demotes an account that
        has already been promoted to OLD_STUDENT.

        Args:
            enrollment_id: Enrollment to update.
            status: IN_PROGRESS, PASS, or FAIL.

        Returns:
            The updated enrollment.

        Raises:
            InvalidEnrollmentStatusError: If status is not a known value.
            EnrollmentNotFoundError: If the enrollment does not exist.
        """
        value = _coerce_status(status, list(EnrollmentStatus))
        return self._write_status(self.get(enrollment_id), value)

    def _write_status(
        self, enrollment: EnrollmentModel, status: EnrollmentStatus
    ) -> EnrollmentModel:
        previous = enrollment.status
        enrollment.status = status
        if status == EnrollmentStatus.IN_PROGRESS:
            enrollment.completion_date = None
        else:
            enrollment.completion_date = datetime.now(pytz.utc)
        try:
            self.db.flush()
            if previous != status:
                self.role_transitions.promote_if_eligible(enrollment.student)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(enrollment)
        logger.info(
            "Enrollment %s status %s -> %s",
            enrollment.id,
            previous.value if previous else None,
            status.value,
        )
        return enrollment

    def remove(self, enrollment_id: int) -> None:
        """Delete an enrollment record, e.g. to take a student off a module.

        Args:
            enrollment_id: Enrollment to delete.

        Raises:
            EnrollmentNotFoundError: If the enrollment does not exist.
        """
        model = self.get(enrollment_id)
        self.db.delete(model)
        self.db.commit()
        logger.info("Removed enrollment %s", enrollment_id)

    @staticmethod
    def can_manage(actor: UserModel, enrollment: EnrollmentModel) -> bool:
        """Check whether an actor may change an enrollment's status.

        Admins may manage any enrollment; teachers only those in modules they
        own.
        """
        if actor.role == Role.ADMIN:
            return True
        if actor.role == Role.TEACHER:
            return enrollment.module is not None and enrollment.module.teacher_id == actor.user_id
        return False

    # --- Queries ---

    def list_active(self, student_id: str) -> List[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .options(joinedload(EnrollmentModel.module))
            .filter(
                EnrollmentModel.user_id == student_id,
                EnrollmentModel.status == EnrollmentStatus.IN_PROGRESS,
            )
            .order_by(EnrollmentModel.id)
            .all()
        )

    def list_completed(self, student_id: str) -> List[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .options(joinedload(EnrollmentModel.module))
            .filter(
                EnrollmentModel.user_id == student_id,
                EnrollmentModel.status.in_(RESOLVED_STATUSES),
            )
            .order_by(EnrollmentModel.id)
            .all()
        )

    def list_all_active(self) -> List[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .options(
                joinedload(EnrollmentModel.student),
                joinedload(EnrollmentModel.module),
            )
            .filter(EnrollmentModel.status == EnrollmentStatus.IN_PROGRESS)
            .order_by(EnrollmentModel.id)
            .all()
        )

    def list_module_active(self, module_id: str) -> List[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .options(joinedload(EnrollmentModel.student))
            .filter(
                EnrollmentModel.module_id == module_id,
                EnrollmentModel.status == EnrollmentStatus.IN_PROGRESS,
            )
            .order_by(EnrollmentModel.id)
            .all()
        )

    def list_module_enrollments(self, module_id: str) -> List[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .options(joinedload(EnrollmentModel.student))
            .filter(EnrollmentModel.module_id == module_id)
            .order_by(EnrollmentModel.id)
            .all()
        )
