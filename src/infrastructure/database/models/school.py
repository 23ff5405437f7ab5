# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School organisation models: classes and students.

Rows here are created by administration tooling; the wellbeing core only
reads them and updates the student point balance.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class SchoolClass(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A class (homeroom) that groups students."""

    __tablename__ = "classes"

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    students: Mapped[list["Student"]] = relationship(
        back_populates="school_class",
        order_by="Student.created_at",
    )


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A student and their reward point balance."""

    __tablename__ = "students"

    student_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    class_id: Mapped[str] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    school_class: Mapped[SchoolClass] = relationship(back_populates="students")

    @property
    def display_name(self) -> str:
        """Name shown to teachers, falling back to the student code."""
        return self.name or self.student_code
