"""Submission model."""

from typing import List

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Boolean, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Submission(Base):
    """One user's attempt at an exercise, matched to it by course and name."""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    exercise_name = Column(String(255), nullable=False, index=True)
    processed = Column(Boolean, nullable=False, default=False)
    all_tests_passed = Column(Boolean, nullable=False, default=False)
    pretest_error = Column(Text)
    points = Column(Text)
    requires_review = Column(Boolean, nullable=False, default=False)
    requests_review = Column(Boolean, nullable=False, default=False)
    reviewed = Column(Boolean, nullable=False, default=False)
    review_dismissed = Column(Boolean, nullable=False, default=False)
    newer_submission_reviewed = Column(Boolean, nullable=False, default=False)
    message_for_reviewer = Column(Text, nullable=False, default="")
    processing_began_at = Column(DateTime)
    processing_completed_at = Column(DateTime)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="submissions")
    course = relationship("Course", back_populates="submissions")
    exercise = relationship(
        "Exercise",
        primaryjoin="and_(foreign(Submission.course_id) == Exercise.course_id, "
                    "foreign(Submission.exercise_name) == Exercise.name)",
        uselist=False,
        viewonly=True,
    )
    reviews = relationship(
        "Review", back_populates="submission", order_by="Review.id",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    # Points and feedback outlive the submission; the reference is nulled
    awarded_points = relationship("AwardedPoint", back_populates="submission", passive_deletes=True)
    feedback_answers = relationship("FeedbackAnswer", back_populates="submission", passive_deletes=True)

    def __repr__(self):
        return f"<Submission(id={self.id}, exercise_name='{self.exercise_name}')>"

    @property
    def points_list(self) -> List[str]:
        """Point names granted by the grader."""
        return (self.points or "").split()

    @property
    def passed(self) -> bool:
        return bool(self.all_tests_passed) and not self.pretest_error

    @property
    def review_pending(self) -> bool:
        """Check if submission is waiting for a reviewer."""
        return (
            bool(self.requires_review or self.requests_review)
            and not self.reviewed
            and not self.review_dismissed
            and not self.newer_submission_reviewed
        )
