"""Store port — abstract interface for the persistent store.

The seeder depends on this protocol, never on SQLite directly.
"""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Callable, Protocol, TypeVar

if TYPE_CHECKING:
    from active.data.db import Transaction

T = TypeVar("T")


class StoreError(Exception):
    """Raised when a store read, write or commit fails."""


class EraseError(StoreError):
    """Raised when erasing the seeded entities cannot be committed."""


class PersistentStore(Protocol):
    """Abstract persistent store used by the seeder."""

    async def perform_background_task(
        self, work: Callable[[Transaction], T]
    ) -> T: ...

    def view_context(self) -> AbstractContextManager[Transaction]: ...

    def background_context(self) -> AbstractContextManager[Transaction]: ...
