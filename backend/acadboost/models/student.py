"""
AcadBoost - Student Model
Registered users and their embedded per-subject performance summaries
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from acadboost.core.database import Base

if TYPE_CHECKING:
    from acadboost.models.test_record import TestRecord


class UserRole(str, Enum):
    """User roles. Only students carry marks."""
    STUDENT = "student"
    FACULTY = "faculty"


class Student(Base):
    """
    A registered user.

    `subjects` maps subject key -> summary dict:
        {current, history, level, concepts_covered, ai_analysis,
         attendance: {total_classes, attended_classes, percentage}}
    """

    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(200))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.STUDENT.value)

    # Legacy rollup, one entry per subject key
    subjects: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    # Relationships
    test_records: Mapped[list["TestRecord"]] = relationship(
        "TestRecord",
        back_populates="student",
        cascade="all, delete-orphan"
    )

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT.value

    def __repr__(self):
        return f"<Student {self.email} role={self.role}>"
