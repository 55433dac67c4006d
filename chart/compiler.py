# chart/compiler.py
import logging
import random
import re
from typing import List, Optional
from chart.model import BMSChart, BMSObject

logger = logging.getLogger(__name__)

MEASURE_LENGTH_CHANNEL = "02"

_CHANNEL_LINE = re.compile(r"^#(\d{3})([0-9A-Za-z]{2}):(.*)$")
_HEADER_LINE = re.compile(r"^#(\w+)(?:\s+(.*))?$")

class BMSSyntaxError(ValueError):
    def __init__(self, lineno: int, msg: str):
        super().__init__(f"line {lineno}: {msg}")
        self.lineno = lineno


class _Branches:
    """#RANDOM / #IF bookkeeping. Each #IF frame is [active, matched]."""
    def __init__(self, rng: random.Random):
        self.rng = rng
        self.randoms: List[int] = []
        self.ifs: List[list] = []

    @property
    def active(self) -> bool:
        return all(frame[0] for frame in self.ifs)

    def handle(self, name: str, arg: str) -> bool:
        """Return True if the header was a control word."""
        if name == "random":
            # drawn even inside a skipped branch
            n = _int(arg)
            self.randoms.append(self.rng.randint(1, n) if n > 0 else 0)
        elif name == "setrandom":
            self.randoms.append(_int(arg))
        elif name == "endrandom":
            if self.randoms:
                self.randoms.pop()
        elif name == "if":
            cur = self.randoms[-1] if self.randoms else None
            hit = cur is not None and cur == _int(arg)
            self.ifs.append([hit, hit])
        elif name == "else":
            if self.ifs:
                frame = self.ifs[-1]
                frame[0] = not frame[1]
                frame[1] = True
        elif name == "endif":
            if self.ifs:
                self.ifs.pop()
        else:
            return False
        return True

def _int(s: str) -> int:
    try:
        return int((s or "").strip())
    except ValueError:
        return 0

def compile_bms(text: str, rng: Optional[random.Random] = None) -> BMSChart:
    """Compile BMS source text into a BMSChart."""
    chart = BMSChart()
    branches = _Branches(rng or random.Random())

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line.startswith("#"):
            continue

        m = _CHANNEL_LINE.match(line)
        if m:
            if branches.active:
                _add_channel_data(chart, lineno, int(m.group(1)), m.group(2).upper(), m.group(3).strip())
            continue

        m = _HEADER_LINE.match(line)
        if not m:
            continue
        name = m.group(1).lower()
        value = (m.group(2) or "").strip()
        if branches.handle(name, value):
            continue
        if branches.active:
            chart.headers.set(name, value)

    logger.debug("Compiled chart: %d objects, %d headers",
                 len(chart.objects), len(list(chart.headers.items())))
    return chart

def _add_channel_data(chart: BMSChart, lineno: int, measure: int, channel: str, data: str):
    if channel == MEASURE_LENGTH_CHANNEL:
        try:
            length = float(data)
        except ValueError:
            raise BMSSyntaxError(lineno, f"invalid measure length {data!r}") from None
        if length <= 0:
            raise BMSSyntaxError(lineno, f"measure length must be positive, got {data!r}")
        chart.time_signatures.set(measure, length)
        return

    count = len(data) // 2
    for i in range(count):
        value = data[i * 2:i * 2 + 2]
        if value == "00":
            continue
        chart.objects.add(BMSObject(channel=channel, measure=measure, fraction=i / count, value=value))

def read_bms_file(path: str, rng: Optional[random.Random] = None) -> BMSChart:
    with open(path, "rb") as f:
        raw = f.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        # most BMS files in the wild are Shift_JIS
        text = raw.decode("cp932", errors="replace")
    return compile_bms(text, rng=rng)
