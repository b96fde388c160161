"""Course session model definitions."""

from sqlalchemy import Column, Date, ForeignKey, Integer, String
from emargement.database import Base


class CourseSession(Base):
    """A course session run by a trainer."""
    __tablename__ = "course_sessions"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    trainer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
