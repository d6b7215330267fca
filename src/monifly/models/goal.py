"""Financial goal model."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

ACTIVE = "active"
COMPLETED = "completed"
PAUSED = "paused"
CANCELLED = "cancelled"
GOAL_STATUSES = (ACTIVE, COMPLETED, PAUSED, CANCELLED)


class FinancialGoal(SQLModel, table=True):
    """Savings target with a monthly contribution plan."""

    __tablename__: ClassVar[str] = "financial_goal"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(nullable=False, max_length=128)
    description: Optional[str] = Field(default=None, max_length=255)
    type: str = Field(default="saving", max_length=32)
    target_amount: float = Field(nullable=False)
    target_currency: str = Field(default="USD", max_length=3)
    current_amount: float = Field(default=0.0, nullable=False)
    # Expressed in the display currency at the time it was set
    monthly_contribution: float = Field(default=0.0, nullable=False)
    contribution_currency: str = Field(default="USD", max_length=3)
    start_date: date = Field(nullable=False)
    target_date: Optional[date] = Field(default=None)
    projected_completion_date: Optional[date] = Field(default=None)
    priority: int = Field(default=0, nullable=False)
    status: str = Field(default=ACTIVE, nullable=False, max_length=16)
    created_at: datetime = Field(default_factory=datetime.now, nullable=False)

    @property
    def progress(self) -> float:
        """Fraction of the target reached, capped at 1.0."""
        if self.target_amount <= 0:
            return 0.0
        return min(self.current_amount / self.target_amount, 1.0)
