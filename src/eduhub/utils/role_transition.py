"""Student role transitions.

A STUDENT whose enrollments have all been resolved as PASS becomes an
OLD_STUDENT (alumni). The decision is derived from stored enrollments only,
so it can be re-run at any time with the same outcome. Promotion is one-way:
nothing here ever demotes an account.
"""

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from eduhub.core.exceptions import EnrollmentNotFoundError
from eduhub.models.enrollment import EnrollmentModel
from eduhub.models.enums import EnrollmentStatus, Role
from eduhub.models.user import UserModel

logger = logging.getLogger(__name__)


class RoleTransitionEngine:
    """Decides whether a student account should be promoted to alumni."""

    def __init__(self, db: Session):
        """Initialize RoleTransitionEngine.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def is_eligible(self, student: UserModel) -> bool:
        """Check whether a student qualifies for OLD_STUDENT right now.

        A student qualifies when they have at least one enrollment, none of
        them IN_PROGRESS, and every one of them PASS. A single FAIL anywhere
        in their history blocks promotion.

        Args:
            student: User whose enrollments are inspected.

        Returns:
            True if the account should be promoted.
        """
        if student.role != Role.STUDENT:
            return False

        has_active = (
            self.db.query(EnrollmentModel.id)
            .filter(
                EnrollmentModel.user_id == student.user_id,
                EnrollmentModel.status == EnrollmentStatus.IN_PROGRESS,
            )
            .first()
            is not None
        )
        if has_active:
            return False

        total = (
            self.db.query(func.count(EnrollmentModel.id))
            .filter(EnrollmentModel.user_id == student.user_id)
            .scalar()
        )
        passed = (
            self.db.query(func.count(EnrollmentModel.id))
            .filter(
                EnrollmentModel.user_id == student.user_id,
                EnrollmentModel.status == EnrollmentStatus.PASS,
            )
            .scalar()
        )
        return total > 0 and total == passed

    def promote_if_eligible(self, student: UserModel) -> bool:
        """Promote the student within the current transaction, without committing.

        Args:
            student: User to evaluate.

        Returns:
            True if the role was changed to OLD_STUDENT.
        """
        if not self.is_eligible(student):
            return False
        student.role = Role.OLD_STUDENT
        self.db.flush()
        logger.info("Promoted user %s to %s", student.user_id, Role.OLD_STUDENT.value)
        return True

    def reconcile_role(self, enrollment_id: int) -> bool:
        """Re-evaluate the role of the student owning an enrollment.

        Args:
            enrollment_id: Enrollment whose owner is evaluated.

        Returns:
            True if the owner was promoted.

        Raises:
            EnrollmentNotFoundError: If the enrollment does not exist.
        """
        enrollment = (
            self.db.query(EnrollmentModel)
            .filter(EnrollmentModel.id == enrollment_id)
            .first()
        )
        if not enrollment:
            raise EnrollmentNotFoundError(enrollment_id)
        try:
            promoted = self.promote_if_eligible(enrollment.student)
            if promoted:
                self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return promoted

    def reconcile_all(self) -> List[str]:
        """Backfill promotions for every STUDENT account.

        Returns:
            IDs of the users that were promoted.
        """
        students = (
            self.db.query(UserModel)
            .filter(UserModel.role == Role.STUDENT)
            .order_by(UserModel.user_id)
            .all()
        )
        try:
            promoted = [s.user_id for s in students if self.promote_if_eligible(s)]
            if promoted:
                self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info("Role backfill promoted %d of %d students", len(promoted), len(students))
        return promoted
