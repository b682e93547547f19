"""Per-exercise option overrides read from the course configuration."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class ExerciseOptions(BaseModel):
    """Overrides for a single exercise.

    Unset fields mean "no override". Unknown keys and non-boolean values are
    rejected so a typo in the course configuration fails loudly instead of
    being ignored or coerced.
    """
    model_config = ConfigDict(extra="forbid", frozen=True, strict=True)

    hidden: Optional[bool] = None
    points_visible: Optional[bool] = None
    returnable: Optional[bool] = None
