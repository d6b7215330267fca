"""SQLModel implementation of Transaction repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from ...models.transaction import Transaction


def _ordered(statement):
    return statement.order_by(Transaction.occurred_at.desc(), Transaction.id)  # type: ignore


class SQLModelTransactionRepository:
    """SQLModel-based transaction repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        return self.session.get(Transaction, transaction_id)

    def list_all(self) -> list[Transaction]:
        """List all transactions."""
        return list(self.session.exec(_ordered(select(Transaction))).all())

    def filter_by_wallet(self, wallet_id: int) -> list[Transaction]:
        """Get all transactions for a specific wallet."""
        statement = _ordered(select(Transaction).where(Transaction.wallet_id == wallet_id))
        return list(self.session.exec(statement).all())

    def filter_by_date_range(self, start: datetime, end: datetime) -> list[Transaction]:
        """Get transactions within a date range."""
        statement = _ordered(
            select(Transaction)
            .where(Transaction.occurred_at >= start)
            .where(Transaction.occurred_at <= end)
        )
        return list(self.session.exec(statement).all())

    def filter_by_category(self, category: str) -> list[Transaction]:
        """Get all transactions for a specific category."""
        statement = _ordered(select(Transaction).where(Transaction.category == category))
        return list(self.session.exec(statement).all())

    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction."""
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def update(self, transaction: Transaction) -> Transaction:
        """Update an existing transaction."""
        self.session.add(transaction)
        self.session.flush()
        return transaction

    def delete(self, transaction_id: int) -> None:
        """Delete a transaction by ID."""
        obj = self.session.get(Transaction, transaction_id)
        if obj:
            self.session.delete(obj)
            self.session.flush()

    def delete_by_wallet(self, wallet_id: int) -> int:
        rows = self.filter_by_wallet(wallet_id)
        for row in rows:
            self.session.delete(row)
        self.session.flush()
        return len(rows)


__all__ = ["SQLModelTransactionRepository"]
