"""Settings repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.settings import AppSetting


class SettingsRepository(Protocol):
    """Key/value application settings."""

    def get(self, key: str) -> Optional[AppSetting]:
        ...

    def set(self, key: str, value: Optional[str], description: Optional[str] = None) -> AppSetting:
        ...

    def delete(self, key: str) -> None:
        ...

    def as_dict(self) -> dict[str, Optional[str]]:
        ...
