# midi/export.py
import logging
import math
import mido
from typing import Iterable, List, Optional, Sequence, Tuple
from notes.model import Note
from config import ExportConfig, DEFAULT_BPM

logger = logging.getLogger(__name__)

MAX_TEMPO = 0xFFFFFF  # set_tempo is a 24-bit value (microseconds per beat)

def valid_bpm(bpm) -> bool:
    """True if `bpm` can be written as a MIDI set_tempo."""
    if bpm is None or not math.isfinite(bpm) or bpm <= 0:
        return False
    return 0 < mido.bpm2tempo(bpm) <= MAX_TEMPO

def _column_order(notes: Sequence[Note]) -> List[str]:
    # "SC" sorts after digits; numeric columns in numeric order
    cols = {n.column for n in notes if n.column is not None}
    return sorted(cols, key=lambda c: (not c.isdigit(), int(c) if c.isdigit() else 0, c))

def export_notes_to_midi(notes: Iterable[Note], path: str, cfg: Optional[ExportConfig] = None,
                         bpm: Optional[float] = None, columns: Optional[Sequence[str]] = None) -> int:
    """Write a one-track MIDI preview: one pitch per column, BGM notes skipped.

    Returns the number of notes written.
    """
    cfg = cfg or ExportConfig()
    notes = list(notes)
    columns = list(columns) if columns is not None else _column_order(notes)
    pitch_of = {c: min(127, cfg.base_pitch + i) for i, c in enumerate(columns)}
    bpm = bpm or cfg.bpm or DEFAULT_BPM
    if not valid_bpm(bpm):
        raise ValueError(f"BPM out of range for MIDI: {bpm!r}")
    tempo = mido.bpm2tempo(bpm)
    tpb = cfg.ticks_per_beat

    # (tick, order, message); note_off sorts before note_on at the same tick
    events: List[Tuple[int, int, mido.Message]] = []
    written = 0
    for n in notes:
        pitch = pitch_of.get(n.column) if n.column is not None else None
        if pitch is None:
            continue
        end = n.end_beat if n.end_beat is not None else n.beat + cfg.tap_beats
        on = round(n.beat * tpb)
        off = max(on + 1, round(end * tpb))
        events.append((on, 1, mido.Message('note_on', note=pitch, velocity=cfg.velocity)))
        events.append((off, 0, mido.Message('note_off', note=pitch, velocity=0)))
        written += 1
    events.sort(key=lambda e: (e[0], e[1]))

    mid = mido.MidiFile(type=0, ticks_per_beat=tpb)
    track = mido.MidiTrack()
    mid.tracks.append(track)
    track.append(mido.MetaMessage('set_tempo', tempo=tempo, time=0))
    now = 0
    for tick, _, msg in events:
        track.append(msg.copy(time=tick - now))
        now = tick
    track.append(mido.MetaMessage('end_of_track', time=0))
    mid.save(path)
    logger.info("Wrote %d notes to %s", written, path)
    return written
