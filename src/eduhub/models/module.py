from sqlalchemy import Boolean, Column, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class ModuleModel(Base):
    __tablename__ = "modules"

    module_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    # Gate on new enrollments only; existing enrollments are unaffected.
    is_active = Column(Boolean, nullable=False, default=True)
    teacher_id = Column(
        String, ForeignKey("users.user_id", ondelete="SET NULL"), index=True, nullable=True
    )
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    teacher = relationship("UserModel", back_populates="taught_modules")
    enrollments = relationship(
        "EnrollmentModel",
        back_populates="module",
        cascade="all, delete-orphan",
    )
    assignments = relationship(
        "AssignmentModel",
        back_populates="module",
        cascade="all, delete-orphan",
    )
