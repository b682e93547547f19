"""Parsing of exercise deadline specifications.

A deadline specification is stored as JSON text: either a single date/time
string or a list of them. Each entry may be written as ``YYYY-MM-DD`` or
``DD.MM.YYYY``, optionally followed by ``HH:MM`` or ``HH:MM:SS``. A date
without a time means the end of that day in server-local time.

The parsed form is one of:

    NoDeadline()
    SingleDeadline(at=datetime)
    MultipleDeadlines(entries=(datetime, ...))

Example:
    >>> parse_deadline_spec('["25.05.2012 14:56"]').resolve()
    datetime.datetime(2012, 5, 25, 14, 56)
"""

import json
import logging
from datetime import datetime, time
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .exceptions import DeadlineFormatError

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y")
TIME_FORMATS = ("%H:%M:%S", "%H:%M")
END_OF_DAY = time(23, 59, 59)


class NoDeadline(BaseModel):
    """The exercise can be submitted indefinitely."""
    model_config = ConfigDict(frozen=True)

    def resolve(self) -> Optional[datetime]:
        return None


class SingleDeadline(BaseModel):
    """One deadline for everyone."""
    model_config = ConfigDict(frozen=True)

    at: datetime

    def resolve(self) -> Optional[datetime]:
        return self.at


class MultipleDeadlines(BaseModel):
    """Several deadlines in the order they were listed; the earliest one applies."""
    model_config = ConfigDict(frozen=True)

    entries: Tuple[datetime, ...]

    def resolve(self) -> Optional[datetime]:
        return min(self.entries)


Deadline = Union[NoDeadline, SingleDeadline, MultipleDeadlines]


def parse_deadline_value(value: str) -> datetime:
    """Parse one date/time string into a naive local datetime."""
    text = value.strip()
    for date_format in DATE_FORMATS:
        try:
            day = datetime.strptime(text, date_format)
        except ValueError:
            pass
        else:
            return datetime.combine(day.date(), END_OF_DAY)

        for time_format in TIME_FORMATS:
            try:
                return datetime.strptime(text, f"{date_format} {time_format}")
            except ValueError:
                continue

    logger.warning(f"Unparsable deadline value: {value!r}")
    raise DeadlineFormatError(value)


def parse_deadline_spec(spec: Optional[str]) -> Deadline:
    """Parse the JSON text stored in ``exercises.deadline_spec``.

    Raises:
        DeadlineFormatError: If the JSON is malformed or any entry is not a
            recognised date/time.
    """
    if spec is None or not spec.strip():
        return NoDeadline()

    try:
        decoded = json.loads(spec)
    except json.JSONDecodeError as e:
        logger.warning(f"Malformed deadline JSON {spec!r}: {e}")
        raise DeadlineFormatError(spec, f"Deadline spec is not valid JSON: {spec!r}") from e

    if decoded is None:
        return NoDeadline()
    if isinstance(decoded, str):
        decoded = [decoded]
    if not isinstance(decoded, list):
        raise DeadlineFormatError(spec, f"Deadline spec must be a string or a list: {spec!r}")

    entries = []
    for item in decoded:
        if item is None:
            continue
        if not isinstance(item, str):
            raise DeadlineFormatError(str(item))
        if not item.strip():
            continue
        entries.append(parse_deadline_value(item))

    if not entries:
        return NoDeadline()
    if len(entries) == 1:
        return SingleDeadline(at=entries[0])
    return MultipleDeadlines(entries=tuple(entries))
