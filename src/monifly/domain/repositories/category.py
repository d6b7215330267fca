"""Custom category repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.category import CustomCategory


class CategoryRepository(Protocol):
    """Repository for user-defined category names."""

    def list_names(self) -> list[str]:
        """Return custom names sorted alphabetically."""
        ...

    def find(self, name: str) -> Optional[CustomCategory]:
        """Case-insensitive lookup by name."""
        ...

    def create(self, category: CustomCategory) -> CustomCategory:
        """Create a new category."""
        ...
