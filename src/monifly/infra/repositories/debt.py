"""SQLModel implementation of the Debt repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.debt import Debt, DebtPayment


class SQLModelDebtRepository:
    """Debts plus their append-only payment history."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, debt_id: int) -> Optional[Debt]:
        return self.session.get(Debt, debt_id)

    def list_all(self) -> list[Debt]:
        statement = select(Debt).order_by(
            Debt.due_date.is_(None), Debt.due_date, Debt.id  # type: ignore
        )
        return list(self.session.exec(statement).all())

    def create(self, debt: Debt) -> Debt:
        self.session.add(debt)
        self.session.flush()
        return debt

    def update(self, debt: Debt) -> Debt:
        self.session.add(debt)
        self.session.flush()
        return debt

    def delete(self, debt_id: int) -> None:
        for payment in self.list_payments(debt_id):
            self.session.delete(payment)
        debt = self.session.get(Debt, debt_id)
        if debt:
            self.session.delete(debt)
        self.session.flush()

    def list_payments(self, debt_id: int) -> list[DebtPayment]:
        statement = (
            select(DebtPayment)
            .where(DebtPayment.debt_id == debt_id)
            .order_by(DebtPayment.paid_on, DebtPayment.id)  # type: ignore
        )
        return list(self.session.exec(statement).all())

    def list_all_payments(self) -> list[DebtPayment]:
        statement = select(DebtPayment).order_by(DebtPayment.id)  # type: ignore
        return list(self.session.exec(statement).all())

    def add_payment(self, payment: DebtPayment) -> DebtPayment:
        self.session.add(payment)
        self.session.flush()
        return payment


__all__ = ["SQLModelDebtRepository"]
