import random

import pytest

from chart.compiler import BMSSyntaxError, compile_bms, read_bms_file
from chart.model import BMSObject
from notes.collection import Notes


def test_headers_are_case_insensitive():

    chart = compile_bms("#TITLE Example Song\n#BPM 150\n#LNOBJ ZZ\n#bpm 160\n")

    assert chart.headers.get("title") == "Example Song"
    assert chart.headers.get("BPM") == "160"
    assert chart.headers.get("lnobj") == "ZZ"
    assert chart.headers.get("genre") is None
    assert "Lnobj" in chart.headers


def test_channel_data_is_split_into_pairs():

    """`00` pairs are rests; position is pair index over pair count."""

    chart = compile_bms("#00111:AA00BB00\n#00216:01\n")

    assert chart.objects.all() == [
        BMSObject(channel="11", measure=1, fraction=0.0, value="AA"),
        BMSObject(channel="11", measure=1, fraction=0.5, value="BB"),
        BMSObject(channel="16", measure=2, fraction=0.0, value="01"),
    ]


def test_all_sorted_is_stable():

    chart = compile_bms("#00112:BB\n#00011:AA\n#00101:CC\n")
    ordered = chart.objects.all_sorted()

    assert [o.value for o in ordered] == ["AA", "BB", "CC"]


def test_measure_to_beat_with_measure_lengths():

    """Channel 02 scales a single measure; 1.0 is four beats."""

    chart = compile_bms("#00102:0.75\n#00202:1.5\n")

    assert chart.measure_to_beat(0, 0.5) == 2.0
    assert chart.measure_to_beat(1, 0.0) == 4.0
    assert chart.measure_to_beat(1, 0.5) == 5.5
    assert chart.measure_to_beat(2, 0.0) == 7.0
    assert chart.measure_to_beat(3, 0.0) == 13.0


@pytest.mark.parametrize("length", ["abc", "0", "-1"])
def test_bad_measure_length(length):

    with pytest.raises(BMSSyntaxError) as info:
        compile_bms(f"#TITLE x\n#00102:{length}\n")

    assert info.value.lineno == 2


def test_random_blocks():

    source = "\n".join([
        "#RANDOM 2",
        "#IF 1",
        "#00111:AA",
        "#ELSE",
        "#00111:BB",
        "#ENDIF",
        "#ENDRANDOM",
        "#00112:CC",
    ])

    values = set()
    for seed in range(20):
        chart = compile_bms(source, rng=random.Random(seed))
        picked = [o.value for o in chart.objects.all() if o.channel == "11"]
        assert len(picked) == 1
        assert [o.value for o in chart.objects.all() if o.channel == "12"] == ["CC"]
        values.update(picked)

    assert values == {"AA", "BB"}


def test_setrandom_and_nested_if():

    source = "\n".join([
        "#SETRANDOM 2",
        "#IF 1",
        "#TITLE one",
        "#SETRANDOM 1",
        "#IF 1",
        "#00111:AA",
        "#ENDIF",
        "#ENDRANDOM",
        "#ENDIF",
        "#IF 2",
        "#TITLE two",
        "#ENDIF",
    ])
    chart = compile_bms(source)

    assert chart.headers.get("title") == "two"
    assert len(chart.objects) == 0


def test_read_bms_file_shift_jis(tmp_path):

    path = tmp_path / "chart.bms"
    path.write_bytes("#TITLE テスト\n#00111:AA\n".encode("cp932"))

    chart = read_bms_file(str(path))

    assert chart.headers.get("title") == "テスト"
    assert len(chart.objects) == 1


def test_compiled_chart_to_notes():

    """A compiled chart satisfies the builder's chart contract."""

    source = "\n".join([
        "#LNOBJ ZZ",
        "#00002:0.5",
        "#00011:AA00ZZ00",
        "#00151:CC",
        "#00251:CC",
        "#00101:0A",
    ])
    notes = Notes.from_bms_chart(compile_bms(source))

    assert [(n.beat, n.end_beat, n.keysound, n.column) for n in notes.all()] == [
        (0.0, 1.0, "AA", "1"),
        (2.0, None, "0A", None),
        (2.0, 6.0, "CC", "1"),
    ]


def test_later_object_replaces_same_position():

    """A repeated channel line overwrites objects at the same position."""

    chart = compile_bms("#00111:AA00\n#00111:BB\n#00111:00CC\n")

    assert [(o.fraction, o.value) for o in chart.objects.all_sorted()] == [(0.0, "BB"), (0.5, "CC")]


def test_bgm_objects_stack():

    chart = compile_bms("#00101:AA\n#00101:BB\n")

    assert [o.value for o in chart.objects.all()] == ["AA", "BB"]


def test_duplicate_lines_build_one_note():

    notes = Notes.from_bms_chart(compile_bms("#00111:AA\n#00111:BB\n"))

    assert [(n.beat, n.keysound) for n in notes.all()] == [(4.0, "BB")]
