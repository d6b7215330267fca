"""Wallet repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.wallet import Wallet


class WalletRepository(Protocol):
    """Repository for managing wallet entities."""

    def get_by_id(self, wallet_id: int) -> Optional[Wallet]:
        """Retrieve a wallet by ID."""
        ...

    def get_default(self) -> Optional[Wallet]:
        """Return the wallet flagged as default, if any."""
        ...

    def list_all(self) -> list[Wallet]:
        """List wallets in display order."""
        ...

    def create(self, wallet: Wallet) -> Wallet:
        """Create a new wallet."""
        ...

    def update(self, wallet: Wallet) -> Wallet:
        """Update an existing wallet."""
        ...

    def delete(self, wallet_id: int) -> None:
        """Delete a wallet by ID."""
        ...
