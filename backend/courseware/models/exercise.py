"""Exercise model and exercise groups.

An exercise decides for a given user whether it is visible, submittable,
attempted, completed and fully reviewed. Submissions refer to exercises by
``(course_id, exercise_name)`` rather than by id.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Set, Union

from sqlalchemy import (
    Column, String, Text, DateTime, ForeignKey, Boolean, Integer, JSON,
    UniqueConstraint, event,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import relationship, validates, object_session
from sqlalchemy.sql import func

from ..database import Base
from ..deadlines import Deadline, parse_deadline_spec
from ..exceptions import CoursewareError, ExerciseValidationError
from .options import ExerciseOptions
from .points import AvailablePoint, AwardedPoint
from .review import Review
from .submission import Submission

logger = logging.getLogger(__name__)

RESERVED_GDOCS_SHEETS = ("MASTER", "PUBLIC")
ROOT_GDOCS_SHEET = "root"


def _parent_name(name: str) -> str:
    """Everything before the last '-' ('' when there is none)."""
    if "-" not in name:
        return ""
    return name.rsplit("-", 1)[0]


class ExerciseGroup:
    """A group of exercises sharing a '-'-separated name prefix.

    Groups are not stored; ``foo-bar`` contains ``foo-bar-baz`` and is itself
    inside ``foo``.
    """

    def __init__(self, course, name: str):
        self.course = course
        self.name = name

    def __repr__(self):
        return f"<ExerciseGroup(course={self.course.id}, name='{self.name}')>"

    def __eq__(self, other):
        if not isinstance(other, ExerciseGroup):
            return NotImplemented
        return self.course.id == other.course.id and self.name == other.name

    def __hash__(self):
        return hash((self.course.id, self.name))

    @property
    def parent(self) -> Optional["ExerciseGroup"]:
        if "-" not in self.name:
            return None
        return ExerciseGroup(self.course, _parent_name(self.name))

    @property
    def exercises(self) -> List["Exercise"]:
        return [ex for ex in self.course.exercises if ex.belongs_to_exercise_group(self)]


class Exercise(Base):
    """Exercise model."""
    __tablename__ = "exercises"
    __table_args__ = (
        UniqueConstraint("course_id", "name", name="uq_exercises_course_id_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    gdocs_sheet_column = Column("gdocs_sheet", String(255), index=True)
    hidden = Column(Boolean, nullable=False, default=False)
    publish_time = Column(DateTime)
    returnable_forced = Column(Boolean)
    deadline_spec = Column(Text)
    options_data = Column("options", JSON, nullable=False, default=dict)
    checksum = Column(String(64), nullable=False, default="")
    has_tests = Column(Boolean, nullable=False, default=False)
    solution_visible_after = Column(DateTime)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    course = relationship("Course", back_populates="exercises")
    available_points = relationship(
        "AvailablePoint", back_populates="exercise", order_by="AvailablePoint.id",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    submissions = relationship(
        "Submission",
        primaryjoin="and_(Exercise.course_id == foreign(Submission.course_id), "
                    "Exercise.name == foreign(Submission.exercise_name))",
        order_by="Submission.id",
        viewonly=True,
    )

    def __repr__(self):
        return f"<Exercise(id={self.id}, name='{self.name}')>"

    # -- options ---------------------------------------------------------

    @property
    def options(self) -> ExerciseOptions:
        return ExerciseOptions.model_validate(self.options_data or {})

    @options.setter
    def options(self, value: Union[ExerciseOptions, Dict, None]):
        if value is None:
            value = ExerciseOptions()
        elif not isinstance(value, ExerciseOptions):
            value = ExerciseOptions.model_validate(value)
        self.options_data = value.model_dump(exclude_none=True)

    # -- gdocs sheet and grouping -----------------------------------------

    @hybrid_property
    def gdocs_sheet(self) -> Optional[str]:
        if not self.points_visible:
            return None
        if self.gdocs_sheet_column is not None:
            return self.gdocs_sheet_column
        return _parent_name(self.name or "") or ROOT_GDOCS_SHEET

    @gdocs_sheet.setter
    def gdocs_sheet(self, value: Optional[str]):
        self.gdocs_sheet_column = value

    @gdocs_sheet.expression
    def gdocs_sheet(cls):
        return cls.gdocs_sheet_column

    @classmethod
    def course_gdocs_sheet_exercises(cls, db, course, sheet: str) -> List["Exercise"]:
        """Exercises of ``course`` whose stored gdocs sheet is ``sheet``."""
        return (
            db.query(cls)
            .filter(cls.course_id == course.id, cls.gdocs_sheet == sheet)
            .order_by(cls.name)
            .all()
        )

    @property
    def points_visible(self) -> bool:
        return self.options.points_visible is not False

    @property
    def exercise_group_name(self) -> str:
        return _parent_name(self.name or "")

    @property
    def exercise_group(self) -> ExerciseGroup:
        return ExerciseGroup(self.course, self.exercise_group_name)

    def belongs_to_exercise_group(self, group: ExerciseGroup) -> bool:
        if group.course.id != self.course_id:
            return False
        own = self.exercise_group_name
        return own == group.name or own.startswith(group.name + "-")

    # -- validation -------------------------------------------------------

    def validation_errors(self) -> Dict[str, str]:
        """Field name to error message for every failed check."""
        errors = {}
        if self.gdocs_sheet_column and self.gdocs_sheet_column in RESERVED_GDOCS_SHEETS:
            errors["gdocs_sheet"] = f"cannot be {self.gdocs_sheet_column}"
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def validate(self) -> None:
        """Raise ExerciseValidationError if any check fails."""
        errors = self.validation_errors()
        if errors:
            raise ExerciseValidationError(errors)

    # -- deadlines --------------------------------------------------------

    @validates("deadline_spec")
    def _validate_deadline_spec(self, key, value):
        # Parse eagerly so a bad spec is rejected when it is assigned
        self._parsed_deadline = (value, parse_deadline_spec(value))
        return value

    @property
    def deadline(self) -> Deadline:
        cached = getattr(self, "_parsed_deadline", None)
        if cached is None or cached[0] != self.deadline_spec:
            cached = (self.deadline_spec, parse_deadline_spec(self.deadline_spec))
            self._parsed_deadline = cached
        return cached[1]

    def deadline_for(self, user) -> Optional[datetime]:
        """The deadline that applies to ``user``, or None if there is none."""
        return self.deadline.resolve()

    def deadline_passed_for(self, user, now: Optional[datetime] = None) -> bool:
        deadline = self.deadline_for(user)
        return deadline is not None and deadline < (now or datetime.now())

    # -- gating -----------------------------------------------------------

    @property
    def is_hidden(self) -> bool:
        return bool(self.hidden) or bool(self.options.hidden)

    @property
    def returnable(self) -> bool:
        if self.options.returnable is False:
            return False
        if self.returnable_forced is not None:
            return bool(self.returnable_forced)
        return True

    def is_published(self, now: Optional[datetime] = None) -> bool:
        return self.publish_time is None or self.publish_time <= (now or datetime.now())

    def submittable_by(self, actor, now: Optional[datetime] = None) -> bool:
        if actor.is_administrator:
            return self.returnable
        if actor.is_guest:
            return False
        now = now or datetime.now()
        return (
            not self.is_hidden
            and self.is_published(now)
            and not self.deadline_passed_for(actor, now)
        )

    def visible_to(self, actor, now: Optional[datetime] = None) -> bool:
        if actor.is_administrator:
            return True
        return not self.is_hidden and self.is_published(now)

    # -- per-user progress ------------------------------------------------

    def _session(self):
        db = object_session(self)
        if db is None:
            raise CoursewareError(f"{self!r} is not attached to a session")
        return db

    def _submissions_by(self, user):
        return self._session().query(Submission).filter(
            Submission.course_id == self.course_id,
            Submission.exercise_name == self.name,
            Submission.user_id == user.id,
        )

    def attempted_by(self, user) -> bool:
        if user.id is None:
            return False
        return self._submissions_by(user).filter(Submission.processed.is_(True)).first() is not None

    def completed_by(self, user) -> bool:
        if user.id is None:
            return False
        query = self._submissions_by(user).filter(
            Submission.all_tests_passed.is_(True),
            (Submission.pretest_error.is_(None)) | (Submission.pretest_error == ""),
        )
        return query.first() is not None

    def reviewed_for(self, user) -> bool:
        if user.id is None:
            return False
        query = (
            self._submissions_by(user)
            .join(Review, Review.submission_id == Submission.id)
            .filter(Submission.reviewed.is_(True))
        )
        return query.first() is not None

    # -- review points ----------------------------------------------------

    @property
    def available_review_points(self) -> List[str]:
        rows = (
            self._session().query(AvailablePoint.name)
            .filter(AvailablePoint.exercise_id == self.id, AvailablePoint.requires_review.is_(True))
            .order_by(AvailablePoint.id)
            .all()
        )
        return [row.name for row in rows]

    def _awarded_point_names(self, user) -> Set[str]:
        if user.id is None:
            return set()
        rows = (
            self._session().query(AwardedPoint.name)
            .filter(AwardedPoint.course_id == self.course_id, AwardedPoint.user_id == user.id)
            .all()
        )
        return {row.name for row in rows}

    def missing_review_points_for(self, user) -> List[str]:
        awarded = self._awarded_point_names(user)
        return [name for name in self.available_review_points if name not in awarded]

    def all_review_points_given_for(self, user) -> bool:
        return not self.missing_review_points_for(user)


@event.listens_for(Exercise, "before_insert")
@event.listens_for(Exercise, "before_update")
def _validate_before_flush(mapper, connection, target):
    """Refuse to write an exercise that fails validation."""
    if not target.is_valid():
        logger.error(f"Refusing to save invalid exercise {target.name!r}: {target.validation_errors()}")
        target.validate()
