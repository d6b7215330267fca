"""Investment case repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.investment import InvestmentAsset, InvestmentCase


class InvestmentRepository(Protocol):
    """Repository for investment cases and the assets they own."""

    def get_case(self, case_id: int) -> Optional[InvestmentCase]:
        """Retrieve a case by ID."""
        ...

    def list_cases(self) -> list[InvestmentCase]:
        """List all cases."""
        ...

    def save_case(self, case: InvestmentCase) -> InvestmentCase:
        """Insert or update a case."""
        ...

    def delete_case(self, case_id: int) -> None:
        """Delete a case and its assets."""
        ...

    def get_asset(self, asset_id: int) -> Optional[InvestmentAsset]:
        """Retrieve an asset by ID."""
        ...

    def list_assets(self, case_id: Optional[int] = None) -> list[InvestmentAsset]:
        """List assets, optionally for a single case."""
        ...

    def save_asset(self, asset: InvestmentAsset) -> InvestmentAsset:
        """Insert or update an asset."""
        ...

    def delete_asset(self, asset_id: int) -> None:
        """Delete an asset by ID."""
        ...
