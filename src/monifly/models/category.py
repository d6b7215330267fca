"""Custom transaction categories registered at runtime."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class CustomCategory(SQLModel, table=True):
    """A user-defined category name outside the built-in set."""

    __tablename__: ClassVar[str] = "custom_category"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False, max_length=64, unique=True)
