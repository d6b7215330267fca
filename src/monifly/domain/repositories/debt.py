"""Debt repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.debt import Debt, DebtPayment


class DebtRepository(Protocol):
    """Repository for debts and their payment history."""

    def get_by_id(self, debt_id: int) -> Optional[Debt]:
        """Retrieve a debt by ID."""
        ...

    def list_all(self) -> list[Debt]:
        """List debts ordered by due date (undated last)."""
        ...

    def create(self, debt: Debt) -> Debt:
        """Create a new debt."""
        ...

    def update(self, debt: Debt) -> Debt:
        """Update an existing debt."""
        ...

    def delete(self, debt_id: int) -> None:
        """Delete a debt and its payments."""
        ...

    def list_payments(self, debt_id: int) -> list[DebtPayment]:
        """Payments for a debt, oldest first."""
        ...

    def list_all_payments(self) -> list[DebtPayment]:
        """Every stored payment."""
        ...

    def add_payment(self, payment: DebtPayment) -> DebtPayment:
        """Append a payment record."""
        ...
