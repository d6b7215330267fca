"""Calendar notes."""

from __future__ import annotations

from datetime import date
from typing import Optional

from ..constants.categories import CALENDAR_NOTE_TYPES
from ..domain.errors import INVALID_INPUT, NOTE_NOT_FOUND, DomainRejection
from ..models.calendar_note import CalendarNote


def _require_note(uow, note_id: int) -> CalendarNote:
    note = uow.notes.get_by_id(note_id)
    if note is None:
        raise DomainRejection(NOTE_NOT_FOUND, "Calendar note not found", note_id=note_id)
    return note


def _check_type(note_type: str) -> str:
    if note_type not in CALENDAR_NOTE_TYPES:
        raise DomainRejection(INVALID_INPUT, f"Unknown note type: {note_type!r}")
    return note_type


def add_calendar_note(
    uow, *, note_date: date, title: str = "", text: str = "", note_type: str = "note"
) -> CalendarNote:
    note = CalendarNote(
        note_date=note_date, title=title, text=text, note_type=_check_type(note_type)
    )
    return uow.notes.save(note)


def update_calendar_note(
    uow,
    note_id: int,
    *,
    note_date: Optional[date] = None,
    title: Optional[str] = None,
    text: Optional[str] = None,
    note_type: Optional[str] = None,
) -> CalendarNote:
    note = _require_note(uow, note_id)
    if note_date is not None:
        note.note_date = note_date
    if title is not None:
        note.title = title
    if text is not None:
        note.text = text
    if note_type is not None:
        note.note_type = _check_type(note_type)
    return uow.notes.save(note)


def toggle_calendar_note(uow, note_id: int) -> CalendarNote:
    note = _require_note(uow, note_id)
    note.is_completed = not note.is_completed
    return uow.notes.save(note)


def delete_calendar_note(uow, note_id: int) -> None:
    _require_note(uow, note_id)
    uow.notes.delete(note_id)


def notes_between(uow, start: date, end: date) -> list[CalendarNote]:
    return [n for n in uow.notes.list_all() if start <= n.note_date <= end]
