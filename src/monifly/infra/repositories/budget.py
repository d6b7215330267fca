"""SQLModel implementation of the budget entry repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.budget import BudgetEntry


class SQLModelBudgetRepository:
    """SQLModel-based budget repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, entry_id: int) -> Optional[BudgetEntry]:
        return self.session.get(BudgetEntry, entry_id)

    def list_all(self) -> list[BudgetEntry]:
        statement = select(BudgetEntry).order_by(
            BudgetEntry.next_due_date.is_(None),  # type: ignore
            BudgetEntry.next_due_date,
            BudgetEntry.id,
        )
        return list(self.session.exec(statement).all())

    def list_active(self, frequency: Optional[str] = None) -> list[BudgetEntry]:
        return [
            entry
            for entry in self.list_all()
            if entry.is_active and (frequency is None or entry.frequency == frequency)
        ]

    def create(self, entry: BudgetEntry) -> BudgetEntry:
        self.session.add(entry)
        self.session.flush()
        return entry

    def update(self, entry: BudgetEntry) -> BudgetEntry:
        self.session.add(entry)
        self.session.flush()
        return entry

    def delete(self, entry_id: int) -> None:
        obj = self.session.get(BudgetEntry, entry_id)
        if obj:
            self.session.delete(obj)
            self.session.flush()


__all__ = ["SQLModelBudgetRepository"]
