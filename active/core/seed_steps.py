"""
Active — Seed steps.

Each step implements SeedStep: it checks whether its entities already exist
and only inserts when they don't, so a seed can run on every launch.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from active.core.factories import (
    DaySequenceFactory,
    FireTimeFactory,
    HabitFactory,
    NotificationFactory,
    UserFactory,
)
from active.data.db import UserStorage
from active.ports.store_port import StoreError

if TYPE_CHECKING:
    from active.data.db import Transaction

logger = logging.getLogger(__name__)


class UserSeedStep:
    """Seeds the app's single user. Always part of the base seed."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng

    def apply(self, transaction: Transaction) -> None:
        logger.info("Seeding user.")

        # A failed lookup counts as "no users".
        try:
            users = transaction.users.fetch_all()
        except StoreError as exc:
            logger.warning("User lookup failed during seed: %s", exc)
            users = []

        if users:
            return

        UserFactory(transaction, self._rng).make_dummy()


class HabitsSeedStep:
    """Seeds dummy habits for the current user.

    Each habit gets a day sequence (with its habit days), one notification
    and one fire time. Skipped entirely when any habit already exists.
    """

    def __init__(
        self,
        count: int = 3,
        sequence_length: int = 21,
        rng: random.Random | None = None,
        user_storage: UserStorage | None = None,
    ) -> None:
        if count < 1 or sequence_length < 1:
            raise ValueError(
                f"Habit count and sequence length must be positive, "
                f"got {count} and {sequence_length}"
            )
        self.count = count
        self.sequence_length = sequence_length
        self._rng = rng or random.Random()
        self._user_storage = user_storage or UserStorage()

    def apply(self, transaction: Transaction) -> None:
        logger.info("Seeding habits.")

        if transaction.habits.exists():
            logger.info("Habits already seeded, skipping")
            return

        user = self._user_storage.get_user(transaction)
        if user is None:
            logger.warning("No user to attach habits to, skipping habit seed")
            return

        habit_factory = HabitFactory(transaction, self._rng)
        sequence_factory = DaySequenceFactory(transaction, self._rng)
        notification_factory = NotificationFactory(transaction, self._rng)
        fire_time_factory = FireTimeFactory(transaction, self._rng)

        for _ in range(self.count):
            habit = habit_factory.make_dummy(user)
            sequence_factory.make_dummy(habit, length=self.sequence_length)
            notification_factory.make_dummy(habit)
            fire_time_factory.make_dummy(habit)

        logger.info(
            "Seeded %d habits with %d-day sequences", self.count, self.sequence_length,
        )
