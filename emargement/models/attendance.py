"""Attendance model definitions."""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer
from emargement.database import Base


class Attendance(Base):
    """A student's sign-in to a course session. Rows are never updated."""
    __tablename__ = "attendances"
    __table_args__ = (
        Index("idx_attendances_session_student", "session_id", "student_id"),
    )

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("course_sessions.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(Boolean, nullable=False, default=True)
