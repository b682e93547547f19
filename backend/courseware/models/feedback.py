"""FeedbackQuestion and FeedbackAnswer models."""

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..database import Base


class FeedbackQuestion(Base):
    """A question students answer about a course's exercises."""
    __tablename__ = "feedback_questions"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    title = Column(Text)
    kind = Column(String(50), nullable=False, default="text")
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("Course", back_populates="feedback_questions")
    answers = relationship(
        "FeedbackAnswer", back_populates="feedback_question",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def __repr__(self):
        return f"<FeedbackQuestion(id={self.id}, kind='{self.kind}')>"


class FeedbackAnswer(Base):
    """A student's answer, kept even if the submission it came with is deleted."""
    __tablename__ = "feedback_answers"

    id = Column(Integer, primary_key=True, index=True)
    feedback_question_id = Column(
        Integer, ForeignKey("feedback_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    exercise_name = Column(String(255), nullable=False)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="SET NULL"), index=True)
    answer = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    feedback_question = relationship("FeedbackQuestion", back_populates="answers")
    submission = relationship("Submission", back_populates="feedback_answers")

    def __repr__(self):
        return f"<FeedbackAnswer(id={self.id}, exercise_name='{self.exercise_name}')>"
