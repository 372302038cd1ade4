"""
Active — Data Models.

Plain records for everything the app tracks locally: the single user, their
habits, the calendar days those habits are tracked on, and the reminders
attached to them. Dates are ISO strings, identifiers are UUID4 strings.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """The app's sole local user. At most one exists per install."""

    id: str
    name: str
    created_at: str = ""


@dataclass
class Habit:
    """A habit the user wants to build."""

    id: str
    user_id: str
    name: str                  # e.g. "Read a book"
    color: int = 0             # index into the app's color palette
    created_at: str = ""


@dataclass
class Day:
    """A calendar day. One record per date, shared by every habit."""

    id: str
    date: str                  # ISO date YYYY-MM-DD


@dataclass(frozen=True)
class HabitDay:
    """One day's tracking outcome for a habit, inside a day sequence.

    ``was_executed`` is True (executed), False (missed) or None when the
    day has no recorded outcome yet (e.g. it is not due).
    """

    id: str
    habit_id: str
    sequence_id: str
    day_id: str
    date: str                         # ISO date of the linked Day
    was_executed: bool | None = None
    updated_at: str | None = None


@dataclass
class DaySequence:
    """A sequence of n days a user has set up for a habit to be tracked on.

    ``days`` is None when the day collection wasn't loaded.
    """

    id: str
    habit_id: str
    from_date: str             # ISO date YYYY-MM-DD
    to_date: str               # ISO date YYYY-MM-DD
    created_at: str = ""
    days: set[HabitDay] | None = None

    def get_executed_days(self) -> set[HabitDay] | None:
        """Return the executed days from the sequence."""
        if self.days is None:
            return None
        return {day for day in self.days if day.was_executed is True}

    def get_missed_days(self) -> set[HabitDay] | None:
        """Return the missed days from the sequence."""
        if self.days is None:
            return None
        return {day for day in self.days if day.was_executed is False}


@dataclass
class Notification:
    """A scheduled reminder for a habit."""

    id: str
    habit_id: str
    fire_date: str                    # ISO datetime
    user_notification_id: str         # identifier handed to the OS scheduler
    was_scheduled: bool = False


@dataclass
class FireTime:
    """A time of day at which a habit's reminders fire."""

    id: str
    created_at: str
    hour: int                  # 0-23
    minute: int                # 0-59
    habit_id: str | None = None
