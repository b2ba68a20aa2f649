"""Admin dashboard statistics."""

from sqlalchemy import func
from sqlalchemy.orm import Session

from eduhub.models.enrollment import EnrollmentModel
from eduhub.models.enums import RESOLVED_STATUSES, Role
from eduhub.models.module import ModuleModel
from eduhub.models.user import UserModel
from eduhub.schemas.stats import AdminStats


class StatsManager:
    """Computes system-wide counters from live rows."""

    def __init__(self, db: Session):
        self.db = db

    def _count(self, column, *criteria) -> int:
        return self.db.query(func.count(column)).filter(*criteria).scalar() or 0

    def get_stats(self) -> AdminStats:
        total_enrollments = self._count(EnrollmentModel.id)
        resolved = self._count(
            EnrollmentModel.id, EnrollmentModel.status.in_(RESOLVED_STATUSES)
        )
        completion_rate = (
            round(resolved / total_enrollments * 100, 2) if total_enrollments else 0.0
        )
        return AdminStats(
            total_users=self._count(UserModel.user_id),
            active_users=self._count(UserModel.user_id, UserModel.role != Role.OLD_STUDENT),
            active_modules=self._count(ModuleModel.module_id, ModuleModel.is_active.is_(True)),
            total_enrollments=total_enrollments,
            active_teachers=self._count(UserModel.user_id, UserModel.role == Role.TEACHER),
            completion_rate=completion_rate,
        )
