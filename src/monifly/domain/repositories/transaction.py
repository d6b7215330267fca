"""Transaction repository protocol."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ...models.transaction import Transaction


class TransactionRepository(Protocol):
    """Repository for managing transaction entities.

    Listings are newest first; equal timestamps keep insertion order.
    """

    def get_by_id(self, transaction_id: int) -> Optional[Transaction]:
        """Retrieve a transaction by ID."""
        ...

    def list_all(self) -> list[Transaction]:
        """List all transactions."""
        ...

    def filter_by_wallet(self, wallet_id: int) -> list[Transaction]:
        """Get all transactions for a specific wallet."""
        ...

    def filter_by_date_range(self, start: datetime, end: datetime) -> list[Transaction]:
        """Get transactions with ``start <= occurred_at <= end``."""
        ...

    def filter_by_category(self, category: str) -> list[Transaction]:
        """Get all transactions for a category."""
        ...

    def create(self, transaction: Transaction) -> Transaction:
        """Create a new transaction."""
        ...

    def update(self, transaction: Transaction) -> Transaction:
        """Update an existing transaction."""
        ...

    def delete(self, transaction_id: int) -> None:
        """Delete a transaction by ID."""
        ...

    def delete_by_wallet(self, wallet_id: int) -> int:
        """Delete every transaction of a wallet, returning the count."""
        ...
