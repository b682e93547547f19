"""Exceptions raised by the courseware domain model."""


class CoursewareError(Exception):
    """Base exception for courseware domain errors."""
    pass


class DeadlineFormatError(CoursewareError, ValueError):
    """Raised when a deadline specification cannot be parsed."""
    def __init__(self, value: str, message: str = ""):
        self.value = value
        self.message = message or f"Invalid deadline: {value!r}"
        super().__init__(self.message)


class ExerciseValidationError(CoursewareError):
    """Raised when an exercise fails validation."""
    def __init__(self, errors: dict):
        self.errors = errors
        details = "; ".join(f"{field} {msg}" for field, msg in errors.items())
        self.message = f"Invalid exercise: {details}"
        super().__init__(self.message)
