"""SQLModel implementation of the calendar note repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Session, select

from ...models.calendar_note import CalendarNote


class SQLModelNoteRepository:
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, note_id: int) -> Optional[CalendarNote]:
        return self.session.get(CalendarNote, note_id)

    def list_all(self) -> list[CalendarNote]:
        statement = select(CalendarNote).order_by(CalendarNote.note_date, CalendarNote.id)  # type: ignore
        return list(self.session.exec(statement).all())

    def save(self, note: CalendarNote) -> CalendarNote:
        self.session.add(note)
        self.session.flush()
        return note

    def delete(self, note_id: int) -> None:
        obj = self.session.get(CalendarNote, note_id)
        if obj:
            self.session.delete(obj)
            self.session.flush()


__all__ = ["SQLModelNoteRepository"]
