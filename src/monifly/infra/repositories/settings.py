"""Settings repository for app-level key/value pairs."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.settings import AppSetting


class SQLModelSettingsRepository:
    """SQLModel-based settings repository."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> Optional[AppSetting]:
        return self.session.get(AppSetting, key)

    def set(self, key: str, value: Optional[str], description: Optional[str] = None) -> AppSetting:
        setting = self.session.get(AppSetting, key)
        if setting:
            setting.value = value
            if description is not None:
                setting.description = description
        else:
            setting = AppSetting(key=key, value=value, description=description)
        self.session.add(setting)
        self.session.flush()
        return setting

    def delete(self, key: str) -> None:
        setting = self.session.get(AppSetting, key)
        if setting:
            self.session.delete(setting)
            self.session.flush()

    def as_dict(self) -> dict[str, Optional[str]]:
        rows = self.session.exec(select(AppSetting).order_by(AppSetting.key)).all()  # type: ignore
        return {row.key: row.value for row in rows}


__all__ = ["SQLModelSettingsRepository"]
