"""SQLAlchemy models for the courseware data layer."""

from .user import User, Guest
from .course import Course
from .options import ExerciseOptions
from .points import AvailablePoint, AwardedPoint
from .review import Review
from .submission import Submission
from .feedback import FeedbackQuestion, FeedbackAnswer
from .exercise import Exercise, ExerciseGroup

__all__ = [
    "User",
    "Guest",
    "Course",
    "Exercise",
    "ExerciseGroup",
    "ExerciseOptions",
    "Submission",
    "Review",
    "AvailablePoint",
    "AwardedPoint",
    "FeedbackQuestion",
    "FeedbackAnswer",
]
