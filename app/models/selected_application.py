"""Selected application (rank record) model."""

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship

from app.db.base import Base


class SelectedApplication(Base):
    """
    An application chosen by a lecturer, with its preference rank.

    Ranks are per course (through the application) and stay dense: the
    selections of one course hold exactly ranks 1..N.
    """

    __tablename__ = "selected_applications"

    # At most one selection per application
    application_id = Column(Integer, ForeignKey("applications.id"), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)  # Copied from the application
    rank = Column(Integer, nullable=False)

    # Relationships
    application = relationship("Application", back_populates="selection")
    comments = relationship(
        "Comment", back_populates="selected_application", order_by="Comment.id", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("rank > 0", name="ck_selected_applications_rank_positive"),
        Index("idx_selected_applications_rank", "rank"),
    )

    def __repr__(self):
        return f"<SelectedApplication application={self.application_id} rank={self.rank}>"
