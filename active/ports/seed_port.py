"""Seed port — the unit of work the seeder runs, in order, on one transaction."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from active.data.db import Transaction


class SeedStep(Protocol):
    """One idempotent seeding procedure.

    Implementations check whether their target entities already exist
    before inserting anything, so running a step twice is harmless.
    """

    def apply(self, transaction: Transaction) -> None: ...
