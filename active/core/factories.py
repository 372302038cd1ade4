"""Dummy record factories — random entities for seeding and tests.

Each factory is bound to a Transaction and inserts what it makes into it.
Nothing is committed here; the caller decides when to save.

Values are random on purpose. Pass a seeded ``random.Random`` as ``rng`` to
get reproducible records in tests.
"""

from __future__ import annotations

import random
import uuid
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from active.data.models import (
    Day,
    DaySequence,
    FireTime,
    Habit,
    HabitDay,
    Notification,
    User,
)

if TYPE_CHECKING:
    from active.data.db import Transaction

_HOURS = 24
# Exclusive: minute 59 is never generated.
_MINUTE_UPPER_BOUND = 59

_USER_NAMES = ["Alex", "Sam", "Jordan", "Taylor", "Morgan", "Riley"]
_HABIT_NAMES = [
    "Read a book",
    "Go for a run",
    "Meditate",
    "Drink water",
    "Practice guitar",
    "Study a language",
    "Stretch",
    "Write a journal entry",
]
_PALETTE_SIZE = 8


def _new_id() -> str:
    return str(uuid.uuid4())


class _BaseFactory:
    def __init__(
        self, transaction: Transaction, rng: random.Random | None = None,
    ) -> None:
        self.transaction = transaction
        self._rng = rng or random.Random()


class UserFactory(_BaseFactory):
    def make_dummy(self) -> User:
        user = User(
            id=_new_id(),
            name=self._rng.choice(_USER_NAMES),
            created_at=datetime.now().isoformat(),
        )
        return self.transaction.users.insert(user)


class HabitFactory(_BaseFactory):
    def make_dummy(self, user: User) -> Habit:
        habit = Habit(
            id=_new_id(),
            user_id=user.id,
            name=self._rng.choice(_HABIT_NAMES),
            color=self._rng.randrange(_PALETTE_SIZE),
            created_at=datetime.now().isoformat(),
        )
        return self.transaction.habits.insert(habit)


class DayFactory(_BaseFactory):
    """Days are unique per date, so this returns the existing one if any."""

    def make_dummy(self, day_date: date | None = None) -> Day:
        if day_date is None:
            day_date = date.today() + timedelta(days=self._rng.randrange(-30, 30))
        iso = day_date.isoformat()

        existing = self.transaction.days.fetch_by_date(iso)
        if existing is not None:
            return existing
        return self.transaction.days.insert(Day(id=_new_id(), date=iso))


class DaySequenceFactory(_BaseFactory):
    """Builds a sequence of consecutive days for a habit.

    Days before today get a random executed/missed outcome. Today and
    later days are left without an outcome.
    """

    def make_dummy(
        self,
        habit: Habit,
        length: int = 21,
        from_date: date | None = None,
    ) -> DaySequence:
        if length < 1:
            raise ValueError(f"Sequence length must be positive, got {length}")
        if from_date is None:
            # Centre the sequence on today so it has past and pending days.
            from_date = date.today() - timedelta(days=length // 2)
        to_date = from_date + timedelta(days=length - 1)

        sequence = self.transaction.day_sequences.insert(
            DaySequence(
                id=_new_id(),
                habit_id=habit.id,
                from_date=from_date.isoformat(),
                to_date=to_date.isoformat(),
                created_at=datetime.now().isoformat(),
            )
        )

        day_factory = DayFactory(self.transaction, self._rng)
        habit_day_factory = HabitDayFactory(self.transaction, self._rng)
        today = date.today()
        days: set[HabitDay] = set()
        for offset in range(length):
            current = from_date + timedelta(days=offset)
            day = day_factory.make_dummy(current)
            outcome = self._rng.random() < 0.5 if current < today else None
            days.add(habit_day_factory.make_dummy(sequence, day, was_executed=outcome))

        sequence.days = days
        return sequence


class HabitDayFactory(_BaseFactory):
    def make_dummy(
        self,
        sequence: DaySequence,
        day: Day,
        was_executed: bool | None = None,
    ) -> HabitDay:
        habit_day = HabitDay(
            id=_new_id(),
            habit_id=sequence.habit_id,
            sequence_id=sequence.id,
            day_id=day.id,
            date=day.date,
            was_executed=was_executed,
            updated_at=datetime.now().isoformat() if was_executed is not None else None,
        )
        return self.transaction.habit_days.insert(habit_day)


class NotificationFactory(_BaseFactory):
    def make_dummy(self, habit: Habit) -> Notification:
        fire_date = datetime.now() + timedelta(
            days=self._rng.randrange(1, 8),
            minutes=self._rng.randrange(24 * 60),
        )
        notification = Notification(
            id=_new_id(),
            habit_id=habit.id,
            fire_date=fire_date.replace(second=0, microsecond=0).isoformat(),
            user_notification_id=_new_id(),
            was_scheduled=False,
        )
        return self.transaction.notifications.insert(notification)


class FireTimeFactory(_BaseFactory):
    def make_dummy(self, habit: Habit | None = None) -> FireTime:
        """Generate a new FireTime at a random hour and minute."""
        fire_time = FireTime(
            id=_new_id(),
            created_at=datetime.now().isoformat(),
            hour=self._rng.randrange(0, _HOURS),
            minute=self._rng.randrange(0, _MINUTE_UPPER_BOUND),
            habit_id=habit.id if habit is not None else None,
        )
        return self.transaction.fire_times.insert(fire_time)
