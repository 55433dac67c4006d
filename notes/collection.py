# ========================= notes/collection.py =========================
from collections.abc import Mapping
from typing import Iterable, Iterator, List, Optional
from notes.model import Note, validate
from notes.errors import NoteValidationError
from notes.channels import CHANNEL_MAPPING, DEFAULT_MAPPING
from notes.builder import BMSNoteBuilder

class Notes:
    """Holds the notes of one chart, playable or not.

    Every note is validated on construction; a single bad note aborts
    the whole collection.

        notes = Notes.from_bms_chart(chart)
        notes.all()
    """
    def __init__(self, notes: Iterable[Note]):
        items = list(notes)
        for i, n in enumerate(items):
            try:
                validate(n)
            except NoteValidationError as e:
                raise NoteValidationError(f"note #{i}: {e}") from e
        self._notes: List[Note] = items

    def count(self) -> int:
        """Number of notes, counting both playable and non-playable ones."""
        return len(self._notes)

    def all(self) -> List[Note]:
        return list(self._notes)

    def playable(self) -> List[Note]:
        return [n for n in self._notes if n.column is not None]

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.all())

    def __repr__(self) -> str:
        return f"Notes(count={self.count()})"

    @classmethod
    def from_bms_chart(cls, chart, mapping: Optional[Mapping] = None) -> "Notes":
        """Build notes from a compiled chart; `mapping` defaults to IIDX_P1."""
        if mapping is None:
            mapping = CHANNEL_MAPPING[DEFAULT_MAPPING]
        return cls(BMSNoteBuilder(chart, mapping).build())
