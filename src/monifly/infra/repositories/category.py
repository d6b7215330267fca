"""SQLModel implementation of the custom category repository."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from ...models.category import CustomCategory


class SQLModelCategoryRepository:
    """SQLModel-based category repository implementation."""

    def __init__(self, session: Session):
        self.session = session

    def list_names(self) -> list[str]:
        rows = self.session.exec(select(CustomCategory)).all()
        return sorted((row.name for row in rows), key=str.lower)

    def find(self, name: str) -> Optional[CustomCategory]:
        statement = select(CustomCategory).where(
            func.lower(CustomCategory.name) == name.strip().lower()
        )
        return self.session.exec(statement).first()

    def create(self, category: CustomCategory) -> CustomCategory:
        self.session.add(category)
        self.session.flush()
        return category


__all__ = ["SQLModelCategoryRepository"]
