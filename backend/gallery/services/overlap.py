"""
Closed-interval overlap detection for exhibition date ranges.

Both ends are inclusive: an exhibition ending on June 5 and another
starting on June 5 share a day and therefore conflict.

The check exists in two forms that must agree:
  - conflicts(): pure Python, used by tests and callers holding rows
  - overlap_clause(): the same test as a SQL predicate for the
    conflict query
"""

from dataclasses import dataclass
from datetime import date

from sqlalchemy import and_
from sqlalchemy.sql.elements import ColumnElement


@dataclass(frozen=True)
class Interval:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def conflicts(existing: Interval, candidate: Interval) -> bool:
    """True when the two closed intervals share at least one day."""
    return existing.start <= candidate.end and existing.end >= candidate.start


def conflicts_by_cases(existing: Interval, candidate: Interval) -> bool:
    """
    Case-by-case form of conflicts():
    existing holds candidate's start, or holds its end,
    or candidate swallows existing whole.
    """
    return (
        existing.start <= candidate.start <= existing.end
        or existing.start <= candidate.end <= existing.end
        or (candidate.start <= existing.start and existing.end <= candidate.end)
    )


def overlap_clause(start_column, end_column, candidate: Interval) -> ColumnElement[bool]:
    """SQL form of conflicts() with the stored row as `existing`."""
    return and_(start_column <= candidate.end, end_column >= candidate.start)
