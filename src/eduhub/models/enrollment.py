from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base
from .enums import EnrollmentStatus


class EnrollmentModel(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "module_id", name="uq_enrollments_user_module"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        String, ForeignKey("users.user_id", ondelete="CASCADE"), index=True, nullable=False
    )
    module_id = Column(
        String, ForeignKey("modules.module_id", ondelete="CASCADE"), index=True, nullable=False
    )
    status = Column(
        Enum(
            EnrollmentStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=EnrollmentStatus.IN_PROGRESS,
        index=True,
    )
    start_date = Column(DateTime(timezone=True), nullable=False)
    completion_date = Column(DateTime(timezone=True), nullable=True)  # None while IN_PROGRESS

    student = relationship("UserModel", back_populates="enrollments")
    module = relationship("ModuleModel", back_populates="enrollments")

    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.IN_PROGRESS

    def is_completed(self) -> bool:
        return self.status != EnrollmentStatus.IN_PROGRESS
