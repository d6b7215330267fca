"""Budget entry repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.budget import BudgetEntry


class BudgetRepository(Protocol):
    """Repository for recurring budget entries."""

    def get_by_id(self, entry_id: int) -> Optional[BudgetEntry]:
        """Retrieve an entry by ID."""
        ...

    def list_all(self) -> list[BudgetEntry]:
        """List entries ordered by next due date."""
        ...

    def list_active(self, frequency: Optional[str] = None) -> list[BudgetEntry]:
        """List active entries, optionally for one frequency."""
        ...

    def create(self, entry: BudgetEntry) -> BudgetEntry:
        """Create a new entry."""
        ...

    def update(self, entry: BudgetEntry) -> BudgetEntry:
        """Update an existing entry."""
        ...

    def delete(self, entry_id: int) -> None:
        """Delete an entry by ID."""
        ...
