"""Review model."""

from typing import List

from sqlalchemy import Column, Text, DateTime, ForeignKey, Boolean, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Review(Base):
    """A reviewer's comments on a submission, possibly granting review points."""
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True)
    review_body = Column(Text, nullable=False)
    points = Column(Text)
    marked_as_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    submission = relationship("Submission", back_populates="reviews")
    reviewer = relationship("User", back_populates="reviews_given")

    def __repr__(self):
        return f"<Review(id={self.id}, submission_id={self.submission_id})>"

    @property
    def points_list(self) -> List[str]:
        return (self.points or "").split()
