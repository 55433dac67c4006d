# ========================= notes/builder.py =========================
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional
from notes.model import Note
from notes.errors import MappingError

logger = logging.getLogger(__name__)

BGM_CHANNEL = "01"

class ChannelKind(Enum):
    NORMAL = "normal"
    LONG_NOTE = "long_note"
    IGNORED = "ignored"

class EventKind(Enum):
    SOUND = "sound"
    TERMINATOR = "terminator"   # #LNOBJ value: ends the previous note on the lane

def classify_channel(channel: str) -> ChannelKind:
    if channel == BGM_CHANNEL:
        return ChannelKind.NORMAL
    head = channel[:1]
    if head in ("1", "2"):
        return ChannelKind.NORMAL
    if head in ("5", "6"):
        return ChannelKind.LONG_NOTE
    return ChannelKind.IGNORED

def normalize_channel(channel: str) -> str:
    """Fold a long-note channel onto its normal channel: 5x -> 1x, 6x -> 2x."""
    head = channel[:1]
    if head == "5":
        return "1" + channel[1:]
    if head == "6":
        return "2" + channel[1:]
    return channel

def classify_event(value: str, lnobj: str) -> EventKind:
    if lnobj and value.lower() == lnobj:
        return EventKind.TERMINATOR
    return EventKind.SOUND

@dataclass
class _OpenLongNote:
    beat: float
    keysound: str
    column: Optional[str]


class BMSNoteBuilder:
    """Single pass over a chart's sorted objects, producing notes.

    `chart` needs `headers.get(name)`, `objects.all_sorted()` and
    `measure_to_beat(measure, fraction)`. Per-lane state lives only
    for the duration of one `build()` call.
    """
    def __init__(self, chart, mapping: Mapping):
        if mapping is None:
            raise MappingError("Expected a channel mapping")
        if not isinstance(mapping, Mapping):
            raise MappingError(f"Channel mapping must be a mapping, got {type(mapping).__name__}")
        self._chart = chart
        self._mapping = mapping

    def build(self) -> List[Note]:
        notes: List[Note] = []
        active_ln: Dict[str, _OpenLongNote] = {}
        last_note: Dict[str, int] = {}   # channel -> index into notes
        lnobj = (self._chart.headers.get("lnobj") or "").lower()

        for obj in self._chart.objects.all_sorted():
            kind = classify_channel(obj.channel)
            if kind is ChannelKind.IGNORED:
                continue
            channel = normalize_channel(obj.channel)
            beat = self._chart.measure_to_beat(obj.measure, obj.fraction)
            if kind is ChannelKind.NORMAL:
                self._handle_normal(notes, last_note, channel, beat, obj.value,
                                    classify_event(obj.value, lnobj))
            elif kind is ChannelKind.LONG_NOTE:
                self._handle_long(notes, active_ln, channel, beat, obj.value)
            else:
                raise AssertionError(f"unhandled channel kind: {kind}")

        for channel, ln in active_ln.items():
            logger.warning("Dropping unterminated long note on channel %s at beat %s (%s)",
                           channel, ln.beat, ln.keysound)
        logger.debug("Built %d notes from chart", len(notes))
        return notes

    def _handle_normal(self, notes, last_note, channel, beat, value, event):
        if event is EventKind.TERMINATOR:
            idx = last_note.get(channel)
            if idx is None:
                logger.debug("LNOBJ on channel %s at beat %s has no note to end", channel, beat)
                return
            notes[idx] = replace(notes[idx], end_beat=beat)
            return
        last_note[channel] = len(notes)
        notes.append(Note(beat=beat, end_beat=None, keysound=value, column=self._column(channel)))

    def _handle_long(self, notes, active_ln, channel, beat, value):
        ln = active_ln.pop(channel, None)
        if ln is not None:
            notes.append(Note(beat=ln.beat, end_beat=beat, keysound=ln.keysound, column=ln.column))
        else:
            active_ln[channel] = _OpenLongNote(beat=beat, keysound=value, column=self._column(channel))

    def _column(self, channel: str) -> Optional[str]:
        return self._mapping.get(channel)
