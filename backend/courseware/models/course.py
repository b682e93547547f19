"""Course model."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, String, Text, DateTime, Boolean, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class Course(Base):
    """A course owns its exercises and everything submitted to them."""
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    hidden = Column(Boolean, nullable=False, default=False)
    hide_after = Column(DateTime)
    source_backend = Column(String(50), nullable=False, default="git")
    source_url = Column(String(500), nullable=False)
    git_branch = Column(Text, nullable=False, default="master")
    spreadsheet_key = Column(String(255))
    locked_exercise_points_visible = Column(Boolean, nullable=False, default=True)
    refreshed_at = Column(DateTime)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships; rows are removed by ON DELETE CASCADE when the course goes
    exercises = relationship(
        "Exercise", back_populates="course", order_by="Exercise.name",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    submissions = relationship(
        "Submission", back_populates="course",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    awarded_points = relationship(
        "AwardedPoint", back_populates="course",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    feedback_questions = relationship(
        "FeedbackQuestion", back_populates="course", order_by="FeedbackQuestion.position",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self):
        return f"<Course(id={self.id}, name='{self.name}')>"

    def visible_to(self, actor, now: Optional[datetime] = None) -> bool:
        """Administrators see every course; others only unhidden, unexpired ones."""
        if actor.is_administrator:
            return True
        if self.hidden:
            return False
        now = now or datetime.now()
        return self.hide_after is None or self.hide_after > now

    def get_exercise(self, name: str):
        """Get an exercise of this course by name."""
        for exercise in self.exercises:
            if exercise.name == name:
                return exercise
        return None

    @property
    def exercise_groups(self) -> List["ExerciseGroup"]:
        """All named groups that contain at least one exercise, parents included."""
        from .exercise import ExerciseGroup

        names = set()
        for exercise in self.exercises:
            group = exercise.exercise_group
            while group is not None and group.name:
                names.add(group.name)
                group = group.parent
        return [ExerciseGroup(self, name) for name in sorted(names)]
