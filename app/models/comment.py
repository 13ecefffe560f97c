"""Lecturer comment on a selected application."""

from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from app.db.base import Base


class Comment(Base):
    """Feedback left by a lecturer on a selection."""

    __tablename__ = "comments"

    selected_application_id = Column(
        Integer, ForeignKey("selected_applications.id"), nullable=False, index=True
    )
    author_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)

    # Relationships
    selected_application = relationship("SelectedApplication", back_populates="comments")
    author = relationship("User")

    def __repr__(self):
        return f"<Comment {self.id} on selection {self.selected_application_id}>"
