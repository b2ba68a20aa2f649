"""User database model.

This module defines the User database model using SQLAlchemy.
"""

from sqlalchemy import Column, Enum, String
from sqlalchemy.orm import relationship

from .base import Base
from .enums import Role


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    user_id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    role = Column(
        Enum(Role, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    display_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    create_at = Column(String, nullable=False)  # ISO format string

    enrollments = relationship(
        "EnrollmentModel",
        back_populates="student",
        cascade="all, delete-orphan",
    )
    submissions = relationship(
        "SubmissionModel",
        back_populates="student",
        cascade="all, delete-orphan",
    )
    taught_modules = relationship("ModuleModel", back_populates="teacher")

    @property
    def name(self) -> str:
        return self.display_name or self.username
