"""Course model."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


class Course(Base):
    """Course that candidates apply to tutor for."""

    __tablename__ = "courses"

    code = Column(String(20), unique=True, index=True, nullable=False)  # e.g. COSC0001
    name = Column(String(255), nullable=False)
    description = Column(Text)
    start_date = Column(String(20))
    end_date = Column(String(20))
    lecturer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    lecturer = relationship("User", back_populates="courses")
    applications = relationship("Application", back_populates="course")

    def __repr__(self):
        return f"<Course {self.code}>"
