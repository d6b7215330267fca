"""Calendar notes: free-standing dated annotations."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class CalendarNote(SQLModel, table=True):
    __tablename__: ClassVar[str] = "calendar_note"

    id: Optional[int] = Field(default=None, primary_key=True)
    note_date: date = Field(nullable=False, index=True)
    title: str = Field(default="", max_length=128)
    text: str = Field(default="", max_length=1024)
    note_type: str = Field(default="note", max_length=16)
    is_completed: bool = Field(default=False, nullable=False)
