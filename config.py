# ========================= config.py =========================
from dataclasses import dataclass, field
from typing import Optional

@dataclass
class BuildConfig:
    mapping: str = "IIDX_P1"             # preset name, see notes/channels.py
    mapping_file: Optional[str] = None   # JSON channel -> column; wins over `mapping`
    seed: Optional[int] = None           # for #RANDOM

@dataclass
class ExportConfig:
    ticks_per_beat: int = 480
    bpm: Optional[float] = None   # None: chart #BPM, else DEFAULT_BPM
    velocity: int = 100
    tap_beats: float = 0.25       # MIDI length of a non-long note
    base_pitch: int = 60          # first column -> C4

@dataclass
class LogConfig:
    level: str = "INFO"
    log_file: str = "bmsnotes.log"
    max_bytes: int = 2 * 1024 * 1024
    backup_count: int = 3

@dataclass
class AppConfig:
    build: BuildConfig = field(default_factory=BuildConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    log: LogConfig = field(default_factory=LogConfig)

DEFAULT_BPM = 130.0
