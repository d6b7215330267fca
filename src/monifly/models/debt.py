"""Debt and debt payment entities."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

I_OWE = "iOwe"
OWED_TO_ME = "owedToMe"
DEBT_TYPES = (I_OWE, OWED_TO_ME)

PENDING = "pending"
PARTIALLY_PAID = "partiallyPaid"
PAID = "paid"
OVERDUE = "overdue"
CANCELLED = "cancelled"
DEBT_STATUSES = (PENDING, PARTIALLY_PAID, PAID, OVERDUE, CANCELLED)
TERMINAL_STATUSES = (PAID, CANCELLED)


class Debt(SQLModel, table=True):
    """Money borrowed from or lent to a person."""

    __tablename__: ClassVar[str] = "debt"

    id: Optional[int] = Field(default=None, primary_key=True)
    type: str = Field(nullable=False, max_length=16)
    person_name: str = Field(default="", max_length=128)
    title: str = Field(default="", max_length=128)
    description: Optional[str] = Field(default=None, max_length=255)
    initial_amount: float = Field(nullable=False)
    paid_amount: float = Field(default=0.0, nullable=False)
    currency: str = Field(default="USD", max_length=3)
    interest_rate: float = Field(default=0.0, nullable=False)
    start_date: date = Field(default_factory=date.today, nullable=False)
    due_date: Optional[date] = Field(default=None)
    status: str = Field(default=PENDING, nullable=False, max_length=16)
    initial_wallet_id: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.now, nullable=False)

    @property
    def remaining(self) -> float:
        return max(self.initial_amount - self.paid_amount, 0.0)


class DebtPayment(SQLModel, table=True):
    """Append-only payment record; amounts are in the debt's currency."""

    __tablename__: ClassVar[str] = "debt_payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    debt_id: int = Field(foreign_key="debt.id", nullable=False, index=True)
    amount: float = Field(nullable=False)
    currency: str = Field(default="USD", max_length=3)
    paid_on: date = Field(nullable=False)
    description: str = Field(default="", max_length=255)
    wallet_id: Optional[int] = Field(default=None)
    transaction_id: Optional[int] = Field(default=None)
