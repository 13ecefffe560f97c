"""User model."""

import enum

from sqlalchemy import Boolean, Column, Enum, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class UserRole(str, enum.Enum):
    """User roles."""
    LECTURER = "Lecturer"
    CANDIDATE = "Candidate"
    ADMIN = "Admin"


class User(Base):
    """Lecturers, candidates and admins."""

    __tablename__ = "users"

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(
        Enum(UserRole, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=UserRole.CANDIDATE,
    )
    is_blocked = Column(Boolean, default=False, nullable=False)

    # Relationships
    applications = relationship("Application", back_populates="user")
    courses = relationship("Course", back_populates="lecturer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<User {self.email} ({self.role.value if self.role else None})>"
