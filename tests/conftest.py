import typing

import pytest

from chart.model import BMSObject


class FakeHeaders:

    """Case-insensitive header lookup backed by a plain dict."""

    def __init__(self, data: typing.Optional[typing.Dict[str, str]] = None) -> None:
        self._data = {k.lower(): v for k, v in (data or {}).items()}

    def get(self, name: str, default: typing.Optional[str] = None) -> typing.Optional[str]:
        return self._data.get(name.lower(), default)


class FakeObjects:

    def __init__(self, objects: typing.List[BMSObject]) -> None:
        self._objects = list(objects)

    def all_sorted(self) -> typing.List[BMSObject]:
        # already in order, as a real chart would deliver them
        return list(self._objects)


class FakeChart:

    """Minimal chart source: beat = measure + fraction."""

    def __init__(self, objects, headers=None) -> None:
        self.headers = FakeHeaders(headers)
        self.objects = FakeObjects(objects)
        self.beat_calls: typing.List[typing.Tuple[int, float]] = []

    def measure_to_beat(self, measure: int, fraction: float) -> float:
        self.beat_calls.append((measure, fraction))
        return float(measure + fraction)


def obj(channel: str, pos: float, value: str) -> BMSObject:

    """Object at beat `pos` on a FakeChart."""

    measure = int(pos)
    return BMSObject(channel=channel, measure=measure, fraction=pos - measure, value=value)


@pytest.fixture
def make_chart() -> typing.Callable[..., FakeChart]:

    def _make(objects, headers=None) -> FakeChart:
        return FakeChart(objects, headers)

    return _make


@pytest.fixture
def mapping() -> typing.Dict[str, str]:
    return {"11": "1", "12": "2", "16": "SC", "21": "8"}
