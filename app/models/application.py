"""Application model."""

import enum

from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


class ApplicationType(str, enum.Enum):
    """Role the candidate applies for."""
    TUTOR = "Tutor"
    LAB_ASSISTANT = "Lab Assistant"


class Application(Base):
    """Candidate application to tutor a course."""

    __tablename__ = "applications"

    course_code = Column(String(20), ForeignKey("courses.code"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(
        Enum(ApplicationType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )

    # Set only by the selection engine
    selected = Column(Boolean, default=False, nullable=False)

    # Candidate details
    availability = Column(String(50))  # Full-time, Part-time
    academic_credentials = Column(Text)
    previous_roles = Column(Text)
    skills = Column(Text)

    # Relationships
    user = relationship("User", back_populates="applications")
    course = relationship("Course", back_populates="applications")
    selection = relationship("SelectedApplication", back_populates="application", uselist=False)

    def __repr__(self):
        return f"<Application {self.id} {self.user_id} -> {self.course_code}>"
