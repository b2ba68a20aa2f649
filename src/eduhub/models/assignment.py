from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import Base
from .enums import AssignmentStatus, SubmissionStatus

TITLE_MAX_LENGTH = 255


class AssignmentModel(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    module_id = Column(
        String, ForeignKey("modules.module_id", ondelete="CASCADE"), index=True, nullable=False
    )
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    due_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(
        Enum(
            AssignmentStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=AssignmentStatus.DRAFT,
    )
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    module = relationship("ModuleModel", back_populates="assignments")
    submissions = relationship(
        "SubmissionModel",
        back_populates="assignment",
        cascade="all, delete-orphan",
    )


class SubmissionModel(Base):
    __tablename__ = "assignment_submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "user_id", name="uq_submissions_assignment_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(
        Integer, ForeignKey("assignments.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id = Column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    submission_text = Column(Text, nullable=False)
    status = Column(
        Enum(
            SubmissionStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=SubmissionStatus.SUBMITTED,
    )
    grade = Column(Integer, nullable=True)  # 0-100, set when graded
    feedback = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    graded_at = Column(DateTime(timezone=True), nullable=True)

    assignment = relationship("AssignmentModel", back_populates="submissions")
    student = relationship("UserModel", back_populates="submissions")
