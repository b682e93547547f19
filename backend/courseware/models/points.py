"""AvailablePoint and AwardedPoint models."""

from sqlalchemy import Column, String, ForeignKey, Boolean, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from ..database import Base


class AvailablePoint(Base):
    """A named point an exercise can award."""
    __tablename__ = "available_points"
    __table_args__ = (
        UniqueConstraint("exercise_id", "name", name="uq_available_points_exercise_id_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    exercise_id = Column(Integer, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    requires_review = Column(Boolean, nullable=False, default=False)

    # Relationships
    exercise = relationship("Exercise", back_populates="available_points")

    def __repr__(self):
        return f"<AvailablePoint(id={self.id}, name='{self.name}')>"


class AwardedPoint(Base):
    """A point a user has earned in a course.

    Each point is stored once per user and course; ``submission_id`` refers to
    the first submission that earned it.
    """
    __tablename__ = "awarded_points"
    __table_args__ = (
        UniqueConstraint("course_id", "user_id", "name", name="uq_awarded_points_course_user_name"),
        UniqueConstraint("user_id", "submission_id", "name", name="uq_awarded_points_user_submission_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="SET NULL"))
    name = Column(String(255), nullable=False)

    # Relationships
    course = relationship("Course", back_populates="awarded_points")
    user = relationship("User", back_populates="awarded_points")
    submission = relationship("Submission", back_populates="awarded_points")

    def __repr__(self):
        return f"<AwardedPoint(id={self.id}, name='{self.name}', user_id={self.user_id})>"
