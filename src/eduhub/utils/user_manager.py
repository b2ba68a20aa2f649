"""User management utilities.

This module provides user record management: creation, lookup, administrative
role changes, and account deletion together with the records that depend on
the account. Authentication and password handling live outside this package.
"""

import logging
import secrets
from datetime import datetime
from typing import List, Optional, Union

import pytz
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduhub.core.exceptions import (
    InvalidRoleError,
    PermissionDeniedError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from eduhub.models.assignment import AssignmentModel, SubmissionModel
from eduhub.models.enrollment import EnrollmentModel
from eduhub.models.enums import Role
from eduhub.models.module import ModuleModel
from eduhub.models.user import UserModel

logger = logging.getLogger(__name__)

RoleLike = Union[Role, str]


def parse_role(role: RoleLike) -> Role:
    """Convert a role value to Role.

    Raises:
        InvalidRoleError: If the value is not one of the known roles.
    """
    try:
        return Role(role)
    except ValueError:
        raise InvalidRoleError(role) from None


class UserManager:
    """Manages user records using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def create_user(
        self,
        username: str,
        role: RoleLike = Role.STUDENT,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> UserModel:
        """Create a new user.

        Args:
            username: Username for the new user.
            role: Initial role; defaults to STUDENT.
            display_name: Optional display name.
            email: Optional email address.

        Returns:
            Created UserModel.

        Raises:
            UserAlreadyExistsError: If username already exists.
            InvalidRoleError: If role is unknown.
        """
        role = parse_role(role)
        existing = self.db.query(UserModel).filter(UserModel.username == username).first()
        if existing:
            raise UserAlreadyExistsError(f"User '{username}' already exists")

        model = UserModel(
            user_id=secrets.token_hex(8),
            username=username,
            role=role,
            display_name=display_name,
            email=email,
            create_at=datetime.now(pytz.utc).isoformat(),
        )
        # Two concurrent requests can both pass the check above; the unique
        # constraint on username catches the loser.
        try:
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except IntegrityError as e:
            self.db.rollback()
            raise UserAlreadyExistsError(f"User '{username}' already exists") from e

        logger.info("Created user: %s (%s)", username, role.value)
        return model

    def get_user(self, user_id: str) -> UserModel:
        model = self.db.query(UserModel).filter(UserModel.user_id == user_id).first()
        if not model:
            raise UserNotFoundError(user_id)
        return model

    def get_user_by_username(self, username: str) -> Optional[UserModel]:
        return self.db.query(UserModel).filter(UserModel.username == username).first()

    def list_users(self) -> List[UserModel]:
        return self.db.query(UserModel).order_by(UserModel.create_at, UserModel.username).all()

    def list_users_by_role(self, role: RoleLike) -> List[UserModel]:
        """List users holding a role.

        Raises:
            InvalidRoleError: If role is unknown.
        """
        role = parse_role(role)
        return (
            self.db.query(UserModel)
            .filter(UserModel.role == role)
            .order_by(UserModel.username)
            .all()
        )

    def change_role(self, actor_id: str, user_id: str, role: RoleLike) -> UserModel:
        """Set a user's role as an administrative action.

        Args:
            actor_id: The admin performing the change.
            user_id: Target user.
            role: New role; any role may be assigned.

        Returns:
            Updated UserModel.

        Raises:
            InvalidRoleError: If role is unknown.
            PermissionDeniedError: If the actor targets their own account.
            UserNotFoundError: If the target does not exist.
        """
        role = parse_role(role)
        user = self.get_user(user_id)
        if user.user_id == actor_id:
            raise PermissionDeniedError("You cannot change your own role.")
        previous = user.role
        user.role = role
        self.db.commit()
        self.db.refresh(user)
        logger.info(
            "User %s role changed by %s: %s -> %s",
            user_id,
            actor_id,
            previous.value,
            role.value,
        )
        return user

    def delete_user(self, actor_id: str, user_id: str) -> None:
        """Delete a user and every record that depends on the account.

        The user's enrollments and submissions are deleted. A teacher's modules
        are deleted too, together with their enrollments and assignments. Modules
        still pointing at a former teacher are left unassigned.

        Raises:
            PermissionDeniedError: If the actor targets their own account.
            UserNotFoundError: If the target does not exist.
        """
        user = self.get_user(user_id)
        if user.user_id == actor_id:
            raise PermissionDeniedError("You cannot delete your own account.")

        # Delete in foreign key order: submissions and enrollments, then
        # assignments and modules, then the user.
        self.db.query(SubmissionModel).filter(
            SubmissionModel.user_id == user_id
        ).delete(synchronize_session=False)
        self.db.query(EnrollmentModel).filter(
            EnrollmentModel.user_id == user_id
        ).delete(synchronize_session=False)

        deleted_modules = 0
        if user.role == Role.TEACHER:
            module_ids = [
                module_id
                for (module_id,) in self.db.query(ModuleModel.module_id).filter(
                    ModuleModel.teacher_id == user_id
                )
            ]
            if module_ids:
                assignment_ids = [
                    assignment_id
                    for (assignment_id,) in self.db.query(AssignmentModel.id).filter(
                        AssignmentModel.module_id.in_(module_ids)
                    )
                ]
                if assignment_ids:
                    self.db.query(SubmissionModel).filter(
                        SubmissionModel.assignment_id.in_(assignment_ids)
                    ).delete(synchronize_session=False)
                    self.db.query(AssignmentModel).filter(
                        AssignmentModel.id.in_(assignment_ids)
                    ).delete(synchronize_session=False)
                self.db.query(EnrollmentModel).filter(
                    EnrollmentModel.module_id.in_(module_ids)
                ).delete(synchronize_session=False)
                deleted_modules = (
                    self.db.query(ModuleModel)
                    .filter(ModuleModel.module_id.in_(module_ids))
                    .delete(synchronize_session=False)
                )

        # An account that lost the TEACHER role can still own modules.
        unassigned = self._unassign_modules(user_id)

        self.db.query(UserModel).filter(UserModel.user_id == user_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        self.db.expire_all()
        logger.info(
            "Deleted user %s (by %s, %d taught modules removed, %d unassigned)",
            user_id,
            actor_id,
            deleted_modules,
            unassigned,
        )

    def delete_teacher(self, actor_id: str, teacher_id: str) -> None:
        """Delete a teacher account, keeping their modules unassigned.

        Raises:
            PermissionDeniedError: If the target is not a TEACHER or is the
                actor themselves.
            UserNotFoundError: If the target does not exist.
        """
        teacher = self.get_user(teacher_id)
        if teacher.role != Role.TEACHER:
            raise PermissionDeniedError("Only teachers can be deleted using this action.")
        if teacher.user_id == actor_id:
            raise PermissionDeniedError("You cannot delete your own account.")

        unassigned = self._unassign_modules(teacher_id)
        self.db.query(SubmissionModel).filter(
            SubmissionModel.user_id == teacher_id
        ).delete(synchronize_session=False)
        self.db.query(EnrollmentModel).filter(
            EnrollmentModel.user_id == teacher_id
        ).delete(synchronize_session=False)
        self.db.query(UserModel).filter(UserModel.user_id == teacher_id).delete(
            synchronize_session=False
        )
        self.db.commit()
        self.db.expire_all()
        logger.info(
            "Deleted teacher %s (by %s, %d modules unassigned)",
            teacher_id,
            actor_id,
            unassigned,
        )

    def _unassign_modules(self, user_id: str) -> int:
        return (
            self.db.query(ModuleModel)
            .filter(ModuleModel.teacher_id == user_id)
            .update(
                {
                    ModuleModel.teacher_id: None,
                    ModuleModel.updated_at: datetime.now(pytz.utc).isoformat(),
                },
                synchronize_session=False,
            )
        )
