"""Crypto holding repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.crypto import CryptoHolding


class HoldingRepository(Protocol):
    """Repository for managing crypto holding entities."""

    def get_by_id(self, holding_id: int) -> Optional[CryptoHolding]:
        """Retrieve a holding by ID."""
        ...

    def get_by_symbol(self, symbol: str) -> Optional[CryptoHolding]:
        """Retrieve the holding for a symbol."""
        ...

    def list_all(self) -> list[CryptoHolding]:
        """List all holdings."""
        ...

    def create(self, holding: CryptoHolding) -> CryptoHolding:
        """Create a new holding."""
        ...

    def update(self, holding: CryptoHolding) -> CryptoHolding:
        """Update an existing holding."""
        ...

    def delete(self, holding_id: int) -> None:
        """Delete a holding by ID."""
        ...
