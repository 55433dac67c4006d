# notes/model.py
from dataclasses import dataclass
from numbers import Real
from typing import Optional
from notes.errors import NoteValidationError

@dataclass(frozen=True)
class Note:
    beat: float                 # beats from the start of the chart
    end_beat: Optional[float]   # only set for long notes
    keysound: str               # BMS object value, e.g. "0A"
    column: Optional[str]       # None = not on a playable lane (BGM)

    @property
    def is_long(self) -> bool:
        return self.end_beat is not None


def _is_number(x) -> bool:
    return isinstance(x, Real) and not isinstance(x, bool)

def validate(note: Note) -> Note:
    """Raise NoteValidationError if `note` breaks a Note invariant."""
    if not _is_number(note.beat):
        raise NoteValidationError(f"beat must be a number: {note!r}")
    if note.beat < 0:
        raise NoteValidationError(f"beat must not be negative: {note!r}")
    if note.end_beat is not None:
        if not _is_number(note.end_beat):
            raise NoteValidationError(f"end_beat must be a number: {note!r}")
        if note.end_beat < note.beat:
            raise NoteValidationError(f"end_beat is before beat: {note!r}")
    if not isinstance(note.keysound, str) or not note.keysound:
        raise NoteValidationError(f"keysound must be a non-empty string: {note!r}")
    if note.column is not None and not isinstance(note.column, str):
        raise NoteValidationError(f"column must be a string or None: {note!r}")
    return note
