"""
Active — Seeder.

Populates the local database with dummy entities for development, and
removes them again. seed() runs every step, in order, on one background
transaction and saves once; erase() runs on the view context.

The two fail differently:
- seed: a failed step or a failed save is logged and the entity counts are
  still reported.
- erase: a failed save raises EraseError. Erasing assumes no other writer
  is active.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Sequence

from active.core.seed_steps import HabitsSeedStep, UserSeedStep
from active.data.db import UserStorage
from active.ports.store_port import EraseError, StoreError

if TYPE_CHECKING:
    from active.data.db import Transaction
    from active.ports.seed_port import SeedStep
    from active.ports.store_port import PersistentStore

logger = logging.getLogger(__name__)

_SEPARATOR = "=" * 59

# Entity name -> Transaction repository attribute, in report order.
_COUNTED_ENTITIES: tuple[tuple[str, str], ...] = (
    ("User", "users"),
    ("Habit", "habits"),
    ("HabitDay", "habit_days"),
    ("Notification", "notifications"),
    ("Day", "days"),
)


@dataclass
class SeedReport:
    """Outcome of one seed run."""

    counts: dict[str, int] = field(default_factory=dict)
    saved: bool = True
    error: str | None = None
    failed_steps: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.saved and not self.failed_steps

    def summary(self) -> str:
        """e.g. "User: 1, Habit: 0, HabitDay: 0, Notification: 0, Day: 0"."""
        return ", ".join(f"{name}: {count}" for name, count in self.counts.items())


class Seeder:
    """Seeds entities into the store by running a list of seed steps.

    The base steps (the user) always run first, followed by ``seed_steps``.
    Extend by passing ``steps`` or by overriding ``seed_steps`` in a subclass.
    """

    def __init__(
        self,
        store: PersistentStore,
        user_storage: UserStorage | None = None,
        steps: Sequence[SeedStep] = (),
    ) -> None:
        self._store = store
        self._user_storage = user_storage or UserStorage()
        self._base_steps: list[SeedStep] = [UserSeedStep()]
        self._extra_steps: list[SeedStep] = list(steps)

    @property
    def seed_steps(self) -> list[SeedStep]:
        """Steps run after the base ones, in order."""
        return list(self._extra_steps)

    @property
    def steps(self) -> list[SeedStep]:
        return self._base_steps + self.seed_steps

    async def seed(self) -> SeedReport:
        """Run every seed step on a background context and save once.

        Await it to know when seeding is done, or wrap it in
        asyncio.create_task() to let it run without blocking the caller.
        """
        report = await self._store.perform_background_task(self._run_steps)

        report.counts = await asyncio.to_thread(self.count_entities)
        logger.info("Seed results: %s", report.summary())
        logger.info(_SEPARATOR)
        return report

    def _run_steps(self, transaction: Transaction) -> SeedReport:
        logger.info(_SEPARATOR)
        report = SeedReport()

        # A failing step must not stop the remaining steps or the save.
        for step in self.steps:
            name = type(step).__name__
            try:
                step.apply(transaction)
            except Exception as exc:
                logger.error("Seed step %s failed: %s", name, exc)
                report.failed_steps.append(name)

        try:
            transaction.save()
        except StoreError as exc:
            logger.error(
                "There was an error when trying to save the seed context: %s", exc,
            )
            report.saved = False
            report.error = str(exc)
        return report

    def erase(self) -> None:
        """Remove all previously seeded entities from the store.

        Deletes every Day (and, by cascade, the habit days on them) and the
        current user (and, by cascade, their habits).

        Raises:
            EraseError: if the deletions can't be saved.
        """
        logger.info("Removing seeded entities.")

        with self._store.view_context() as transaction:
            # Failed lookups are treated as "nothing to delete".
            try:
                days = transaction.days.fetch_all()
            except StoreError as exc:
                logger.warning("Day lookup failed during erase: %s", exc)
                days = []

            try:
                user = self._user_storage.get_user(transaction)
            except StoreError as exc:
                logger.warning("User lookup failed during erase: %s", exc)
                user = None

            try:
                for day in days:
                    transaction.days.delete(day.id)
                if user is not None:
                    transaction.users.delete(user.id)
                transaction.save()
            except StoreError as exc:
                logger.critical("Error when erasing the seed: %s", exc)
                raise EraseError("Error when erasing the seed.") from exc

        logger.info("Removed %d days and %d user", len(days), int(user is not None))

    def count_entities(self) -> dict[str, int]:
        """Count each seeded entity type through the view context.

        A failed count is reported as 0.
        """
        counts: dict[str, int] = {}
        with self._store.view_context() as transaction:
            for name, attr in _COUNTED_ENTITIES:
                try:
                    counts[name] = getattr(transaction, attr).count()
                except StoreError as exc:
                    logger.warning("Counting %s entities failed: %s", name, exc)
                    counts[name] = 0
                logger.info(
                    "The number of %s entities in the database is: %d",
                    name, counts[name],
                )
        return counts


class DevelopmentSeeder(Seeder):
    """Seeder that also fills the store with dummy habits."""

    def __init__(
        self,
        store: PersistentStore,
        user_storage: UserStorage | None = None,
        habit_count: int | None = None,
        sequence_length: int | None = None,
    ) -> None:
        super().__init__(store, user_storage=user_storage)
        if habit_count is None or sequence_length is None:
            from active.config import settings
            if habit_count is None:
                habit_count = settings.SEED_HABIT_COUNT
            if sequence_length is None:
                sequence_length = settings.SEED_SEQUENCE_LENGTH
        self._habits_step = HabitsSeedStep(
            count=habit_count,
            sequence_length=sequence_length,
            user_storage=self._user_storage,
        )

    @property
    def seed_steps(self) -> list[SeedStep]:
        return super().seed_steps + [self._habits_step]
