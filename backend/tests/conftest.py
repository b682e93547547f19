"""Test configuration and fixtures."""

import os
from itertools import count

# Keep the module-level engine off any real server while testing
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from courseware.database import Base, configure_sqlite


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="session")
def engine():
    """Create test database engine."""
    from courseware import models  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture(scope="function")
def db_session(engine):
    """Create a test session whose work is rolled back after each test."""
    connection = engine.connect()
    transaction = connection.begin()
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=connection,
        join_transaction_mode="create_savepoint",
    )
    session = TestingSessionLocal()

    yield session

    # Rollback transaction and close
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def sequence():
    """Unique numbers for generated names, like factory sequences."""
    return count(1)


@pytest.fixture
def make_user(db_session, sequence):
    """Factory for regular users."""
    from courseware.models import User

    def _make_user(**attrs):
        n = next(sequence)
        attrs.setdefault("login", f"user{n}")
        attrs.setdefault("email", f"user{n}@example.com")
        attrs.setdefault("administrator", False)
        user = User(**attrs)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_admin(make_user, sequence):
    """Factory for administrators."""
    def _make_admin(**attrs):
        n = next(sequence)
        attrs.setdefault("login", f"admin{n}")
        attrs.setdefault("email", f"admin{n}@example.com")
        return make_user(administrator=True, **attrs)

    return _make_admin


@pytest.fixture
def make_course(db_session, sequence):
    """Factory for courses."""
    from courseware.models import Course

    def _make_course(**attrs):
        attrs.setdefault("name", f"course{next(sequence)}")
        attrs.setdefault("source_url", "git@example.com")
        course = Course(**attrs)
        db_session.add(course)
        db_session.commit()
        return course

    return _make_course


@pytest.fixture
def make_exercise(db_session, sequence, make_course):
    """Factory for exercises. ``returnable=True`` forces them returnable."""
    from courseware.models import Exercise

    def _make_exercise(course=None, returnable=False, **attrs):
        n = next(sequence)
        attrs.setdefault("name", f"exercise{n}")
        if returnable:
            attrs.setdefault("returnable_forced", True)
        exercise = Exercise(course=course or make_course(), **attrs)
        db_session.add(exercise)
        db_session.commit()
        return exercise

    return _make_exercise


@pytest.fixture
def make_submission(db_session, make_user, make_course):
    """Factory for submissions; processed unless told otherwise."""
    from courseware.models import Submission

    def _make_submission(exercise=None, user=None, course=None, **attrs):
        course = course or (exercise.course if exercise is not None else make_course())
        attrs.setdefault("processed", True)
        if exercise is not None:
            attrs.setdefault("exercise_name", exercise.name)
        attrs.setdefault("exercise_name", "exercise")
        submission = Submission(course=course, user=user or make_user(), **attrs)
        db_session.add(submission)
        db_session.commit()
        return submission

    return _make_submission


@pytest.fixture
def make_available_point(db_session, sequence):
    """Factory for available points."""
    from courseware.models import AvailablePoint

    def _make_available_point(exercise, **attrs):
        attrs.setdefault("name", f"point{next(sequence)}")
        point = AvailablePoint(exercise=exercise, **attrs)
        db_session.add(point)
        db_session.commit()
        return point

    return _make_available_point


@pytest.fixture
def make_awarded_point(db_session, sequence):
    """Factory for awarded points."""
    from courseware.models import AwardedPoint

    def _make_awarded_point(course, user, submission=None, **attrs):
        attrs.setdefault("name", f"point{next(sequence)}")
        point = AwardedPoint(course=course, user=user, submission=submission, **attrs)
        db_session.add(point)
        db_session.commit()
        return point

    return _make_awarded_point


@pytest.fixture
def make_review(db_session, make_user):
    """Factory for reviews."""
    from courseware.models import Review

    def _make_review(submission, reviewer=None, **attrs):
        attrs.setdefault("review_body", "This is a review")
        review = Review(submission=submission, reviewer=reviewer or make_user(), **attrs)
        db_session.add(review)
        db_session.commit()
        return review

    return _make_review


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_admin):
    return make_admin()


@pytest.fixture
def course(make_course):
    return make_course()
