"""User model definitions."""

from enum import Enum

from sqlalchemy import Column, Integer, String
from emargement.database import Base


class Role(str, Enum):
    TRAINER = "trainer"
    STUDENT = "student"


class User(Base):
    """Represents a trainer or a student account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)  # trainer/student
