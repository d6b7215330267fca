"""SQLModel implementation of the financial goal repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.goal import FinancialGoal


class SQLModelGoalRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, goal_id: int) -> Optional[FinancialGoal]:
        return self.session.get(FinancialGoal, goal_id)

    def list_all(self) -> list[FinancialGoal]:
        statement = select(FinancialGoal).order_by(
            FinancialGoal.projected_completion_date.is_(None),  # type: ignore
            FinancialGoal.projected_completion_date,
            FinancialGoal.id,
        )
        return list(self.session.exec(statement).all())

    def create(self, goal: FinancialGoal) -> FinancialGoal:
        self.session.add(goal)
        self.session.flush()
        return goal

    def update(self, goal: FinancialGoal) -> FinancialGoal:
        self.session.add(goal)
        self.session.flush()
        return goal

    def delete(self, goal_id: int) -> None:
        obj = self.session.get(FinancialGoal, goal_id)
        if obj:
            self.session.delete(obj)
            self.session.flush()


__all__ = ["SQLModelGoalRepository"]
