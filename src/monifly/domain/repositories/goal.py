"""Financial goal repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.goal import FinancialGoal


class GoalRepository(Protocol):
    """Repository for financial goals."""

    def get_by_id(self, goal_id: int) -> Optional[FinancialGoal]:
        """Retrieve a goal by ID."""
        ...

    def list_all(self) -> list[FinancialGoal]:
        """List goals by projected completion date (undated last)."""
        ...

    def create(self, goal: FinancialGoal) -> FinancialGoal:
        """Create a new goal."""
        ...

    def update(self, goal: FinancialGoal) -> FinancialGoal:
        """Update an existing goal."""
        ...

    def delete(self, goal_id: int) -> None:
        """Delete a goal by ID."""
        ...
