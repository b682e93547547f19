"""Point awarding service.

Awarded points are stored at most once per ``(course, user, name)`` and per
``(user, submission, name)``. The unique constraints are the only guard: when
two writers race, the loser's insert fails inside a SAVEPOINT and the row the
winner wrote is returned instead.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..models import AvailablePoint, AwardedPoint, Exercise, Review, Submission

logger = logging.getLogger(__name__)


class PointService:
    def __init__(self, db: Session):
        self.db = db

    def find_awarded_point(
        self, course_id: int, user_id: int, name: str, submission_id: Optional[int] = None
    ) -> Optional[AwardedPoint]:
        """Find the row that blocks awarding ``name`` again, if any."""
        condition = and_(AwardedPoint.course_id == course_id, AwardedPoint.name == name)
        if submission_id is not None:
            condition = or_(condition, AwardedPoint.submission_id == submission_id)
        return self.db.query(AwardedPoint).filter(
            AwardedPoint.user_id == user_id,
            AwardedPoint.name == name,
            condition,
        ).first()

    def _award(
        self, course_id: int, user_id: int, name: str, submission_id: Optional[int] = None
    ) -> Tuple[AwardedPoint, bool]:
        existing = self.find_awarded_point(course_id, user_id, name, submission_id)
        if existing:
            return existing, False

        point = AwardedPoint(course_id=course_id, user_id=user_id, name=name, submission_id=submission_id)
        try:
            with self.db.begin_nested():
                self.db.add(point)
        except IntegrityError:
            # Another writer inserted the same point between our check and insert
            logger.info(f"Point {name!r} already awarded to user {user_id} in course {course_id}")
            existing = self.find_awarded_point(course_id, user_id, name, submission_id)
            if existing is None:
                raise
            return existing, False

        logger.debug(f"Awarded point {name!r} to user {user_id} in course {course_id}")
        return point, True

    def award(
        self, course_id: int, user_id: int, name: str, submission_id: Optional[int] = None
    ) -> Tuple[AwardedPoint, bool]:
        """Award a point once. Returns the row and whether it was created now."""
        point, created = self._award(course_id, user_id, name, submission_id)
        self.db.commit()
        return point, created

    def _review_point_names(self, exercise: Optional[Exercise]) -> set:
        if exercise is None:
            return set()
        return set(exercise.available_review_points)

    def award_submission_points(self, submission: Submission) -> List[AwardedPoint]:
        """Award the points a graded submission earned.

        Points that require review are skipped; they are given by
        ``award_review_points``. Returns only the newly created rows.
        """
        review_only = self._review_point_names(submission.exercise)
        created_points = []
        for name in submission.points_list:
            if name in review_only:
                continue
            point, created = self._award(submission.course_id, submission.user_id, name, submission.id)
            if created:
                created_points.append(point)
        self.db.commit()
        logger.info(
            f"Submission {submission.id}: awarded {len(created_points)} new point(s) "
            f"to user {submission.user_id}"
        )
        return created_points

    def award_review_points(self, review: Review) -> List[AwardedPoint]:
        """Award the points listed on a review and mark its submission reviewed."""
        submission = review.submission
        available = set()
        if submission.exercise is None:
            logger.warning(
                f"Review {review.id}: submission {submission.id} has no exercise "
                f"{submission.exercise_name!r}; awarding nothing"
            )
        else:
            available = {
                point.name for point in self.db.query(AvailablePoint).filter(
                    AvailablePoint.exercise_id == submission.exercise.id
                )
            }

        created_points = []
        for name in review.points_list:
            if name not in available:
                logger.warning(f"Review {review.id} lists unknown point {name!r}; skipping")
                continue
            point, created = self._award(submission.course_id, submission.user_id, name, submission.id)
            if created:
                created_points.append(point)

        submission.reviewed = True
        submission.review_dismissed = False
        self.db.commit()
        return created_points
