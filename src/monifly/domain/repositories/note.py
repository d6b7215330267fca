"""Calendar note repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.calendar_note import CalendarNote


class NoteRepository(Protocol):
    """Repository for calendar notes."""

    def get_by_id(self, note_id: int) -> Optional[CalendarNote]:
        ...

    def list_all(self) -> list[CalendarNote]:
        ...

    def save(self, note: CalendarNote) -> CalendarNote:
        ...

    def delete(self, note_id: int) -> None:
        ...
