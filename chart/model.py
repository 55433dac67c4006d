# chart/model.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

BEATS_PER_MEASURE = 4.0
BGM_CHANNEL = "01"

@dataclass(frozen=True)
class BMSObject:
    channel: str     # e.g. "11", "51", "01"
    measure: int
    fraction: float  # position inside the measure, 0 <= fraction < 1
    value: str       # two-character base-36 id

class BMSHeaders:
    """Header lines (#TITLE, #BPM, #LNOBJ, ...); names are case-insensitive."""
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._data.get(name.lower(), default)

    def set(self, name: str, value: str):
        self._data[name.lower()] = value

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._data

    def items(self):
        return self._data.items()

class BMSObjects:
    """Chart objects in file order.

    A later object on the same channel and position replaces the earlier
    one, except on the BGM channel 01 where objects stack.
    """
    def __init__(self):
        self._objects: List[BMSObject] = []
        self._slots: Dict[Tuple[str, int, float], int] = {}

    def add(self, obj: BMSObject):
        if obj.channel == BGM_CHANNEL:
            self._objects.append(obj)
            return
        key = (obj.channel, obj.measure, obj.fraction)
        idx = self._slots.get(key)
        if idx is None:
            self._slots[key] = len(self._objects)
            self._objects.append(obj)
        else:
            self._objects[idx] = obj

    def all(self) -> List[BMSObject]:
        return list(self._objects)

    def all_sorted(self) -> List[BMSObject]:
        # stable: objects at the same position keep file order
        return sorted(self._objects, key=lambda o: (o.measure, o.fraction))

    def __len__(self) -> int:
        return len(self._objects)

class TimeSignatures:
    """Measure length factors from channel 02 (1.0 = 4 beats)."""
    def __init__(self):
        self._lengths: Dict[int, float] = {}

    def set(self, measure: int, length: float):
        self._lengths[measure] = length

    def get(self, measure: int) -> float:
        return self._lengths.get(measure, 1.0)

    def measure_to_beat(self, measure: int, fraction: float) -> float:
        start = sum(self.get(m) for m in range(measure)) * BEATS_PER_MEASURE
        return start + self.get(measure) * BEATS_PER_MEASURE * fraction

@dataclass
class BMSChart:
    headers: BMSHeaders = field(default_factory=BMSHeaders)
    objects: BMSObjects = field(default_factory=BMSObjects)
    time_signatures: TimeSignatures = field(default_factory=TimeSignatures)

    def measure_to_beat(self, measure: int, fraction: float) -> float:
        return self.time_signatures.measure_to_beat(measure, fraction)
