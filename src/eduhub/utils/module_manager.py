"""Module management utilities."""

import logging
import secrets
from datetime import datetime
from typing import List, Optional

import pytz
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from eduhub.config import UNASSIGNED_TEACHER_NAME
from eduhub.core.exceptions import (
    LearningModuleNotFoundError,
    PermissionDeniedError,
    UserNotFoundError,
    ValidationError,
)
from eduhub.models.enrollment import EnrollmentModel
from eduhub.models.enums import Role
from eduhub.models.module import ModuleModel
from eduhub.models.user import UserModel

logger = logging.getLogger(__name__)


class ModuleManager:
    """Manages modules, their active flag, and teacher assignment."""

    def __init__(self, db: Session):
        self.db = db

    def create_module(
        self,
        name: str,
        description: Optional[str] = None,
        teacher_id: Optional[str] = None,
        is_active: bool = True,
    ) -> ModuleModel:
        """Create a new module.

        Args:
            name: Display name, must not be blank.
            description: Optional free text.
            teacher_id: Optional owning teacher; must have the TEACHER role.
            is_active: Whether the module accepts enrollments.

        Returns:
            The created module.

        Raises:
            ValidationError: If the name is blank.
            UserNotFoundError: If teacher_id does not exist.
            PermissionDeniedError: If teacher_id is not a teacher.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Module name cannot be empty.")
        if teacher_id is not None:
            self._require_teacher(teacher_id)

        now = datetime.now(pytz.utc).isoformat()
        model = ModuleModel(
            module_id=secrets.token_hex(8),
            name=name,
            description=description,
            teacher_id=teacher_id,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        self.db.add(model)
        self.db.commit()
        self.db.refresh(model)
        logger.info("Created module %s (%s)", model.module_id, model.name)
        return model

    def get_module(self, module_id: str) -> ModuleModel:
        model = (
            self.db.query(ModuleModel)
            .filter(ModuleModel.module_id == module_id)
            .first()
        )
        if not model:
            raise LearningModuleNotFoundError(module_id)
        return model

    def list_modules(self) -> List[ModuleModel]:
        return (
            self.db.query(ModuleModel)
            .options(joinedload(ModuleModel.teacher))
            .order_by(ModuleModel.created_at, ModuleModel.module_id)
            .all()
        )

    def list_active_modules(self) -> List[ModuleModel]:
        return (
            self.db.query(ModuleModel)
            .filter(ModuleModel.is_active.is_(True))
            .order_by(ModuleModel.created_at, ModuleModel.module_id)
            .all()
        )

    def list_modules_for_teacher(self, teacher_id: str) -> List[ModuleModel]:
        return (
            self.db.query(ModuleModel)
            .filter(ModuleModel.teacher_id == teacher_id)
            .order_by(ModuleModel.created_at, ModuleModel.module_id)
            .all()
        )

    def set_active(self, module_id: str, is_active: bool) -> ModuleModel:
        model = self.get_module(module_id)
        model.is_active = is_active
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info(
            "Module %s %s", module_id, "unarchived" if is_active else "archived"
        )
        return model

    def archive(self, module_id: str) -> ModuleModel:
        return self.set_active(module_id, False)

    def unarchive(self, module_id: str) -> ModuleModel:
        return self.set_active(module_id, True)

    def toggle_active(self, module_id: str) -> ModuleModel:
        model = self.get_module(module_id)
        return self.set_active(module_id, not model.is_active)

    def assign_teacher(self, module_id: str, teacher_id: str) -> ModuleModel:
        """Assign a teacher to a module, replacing any previous teacher.

        Raises:
            LearningModuleNotFoundError: If the module does not exist.
            UserNotFoundError: If the teacher does not exist.
            PermissionDeniedError: If the user is not a TEACHER.
        """
        model = self.get_module(module_id)
        self._require_teacher(teacher_id)
        model.teacher_id = teacher_id
        model.updated_at = datetime.now(pytz.utc).isoformat()
        self.db.commit()
        self.db.refresh(model)
        logger.info("Assigned teacher %s to module %s", teacher_id, module_id)
        return model

    def module_overview(self) -> List[dict]:
        """Summarize every module for the admin dashboard."""
        counts = dict(
            self.db.query(EnrollmentModel.module_id, func.count(EnrollmentModel.id))
            .group_by(EnrollmentModel.module_id)
            .all()
        )
        results = []
        for model in self.list_modules():
            teacher = model.teacher
            results.append(
                {
                    "module_id": model.module_id,
                    "name": model.name,
                    "description": model.description,
                    "teacher_name": teacher.name if teacher else UNASSIGNED_TEACHER_NAME,
                    "teacher_email": teacher.email if teacher else None,
                    "student_count": counts.get(model.module_id, 0),
                    "is_active": model.is_active,
                    "created_at": model.created_at,
                }
            )
        return results

    def _require_teacher(self, teacher_id: str) -> UserModel:
        user = self.db.query(UserModel).filter(UserModel.user_id == teacher_id).first()
        if not user:
            raise UserNotFoundError(teacher_id)
        if user.role != Role.TEACHER:
            raise PermissionDeniedError(
                "Only users with TEACHER role can be assigned."
            )
        return user
