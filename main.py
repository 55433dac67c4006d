# main.py
import sys, os
sys.path.append(os.path.dirname(__file__))  # 確保能找到 config.py

from utils.crashlog import setup_crashlog, log_exception, log_dir

import argparse
import json
import logging
import random
from typing import Optional, Sequence
from config import AppConfig, BuildConfig, ExportConfig, LogConfig, DEFAULT_BPM
from chart.compiler import read_bms_file, BMSSyntaxError
from notes.channels import CHANNEL_MAPPING, resolve_mapping, save_mapping_json
from notes.collection import Notes
from notes.errors import MappingError, NoteValidationError
from midi.export import export_notes_to_midi, valid_bpm

logger = logging.getLogger("bmsnotes")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

def _init_logging(cfg: LogConfig):
    root = logging.getLogger()
    if root.handlers:
        return

    logging.basicConfig(level=cfg.level.upper(), format=LOG_FORMAT, encoding="utf-8")
    from logging.handlers import RotatingFileHandler
    fh = RotatingFileHandler(os.path.join(log_dir(), cfg.log_file),
                             maxBytes=cfg.max_bytes, backupCount=cfg.backup_count, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)

def notes_to_json(notes: Notes) -> list:
    return [
        {"beat": n.beat, "end_beat": n.end_beat, "keysound": n.keysound, "column": n.column}
        for n in notes.all()
    ]

def chart_bpm(chart) -> float:
    """#BPM of the chart, or DEFAULT_BPM when missing or unusable."""
    raw = chart.headers.get("bpm")
    if not raw:
        return DEFAULT_BPM
    try:
        bpm = float(raw)
    except ValueError:
        bpm = None
    if not valid_bpm(bpm):
        logger.warning("Bad #BPM %r, using %s", raw, DEFAULT_BPM)
        return DEFAULT_BPM
    return bpm

def run(path: str, cfg: AppConfig, json_out: Optional[str] = None, midi_out: Optional[str] = None,
        mapping_out: Optional[str] = None) -> Notes:
    rng = random.Random(cfg.build.seed)
    chart = read_bms_file(path, rng=rng)
    mapping = resolve_mapping(cfg.build.mapping, cfg.build.mapping_file)
    if mapping_out:
        save_mapping_json(mapping, mapping_out)
    notes = Notes.from_bms_chart(chart, mapping=mapping)
    logger.info("%s: %d notes (%d playable)", path, notes.count(), len(notes.playable()))

    if json_out:
        with open(json_out, "w", encoding="utf-8") as f:
            json.dump(notes_to_json(notes), f, ensure_ascii=False, indent=2)
    if midi_out:
        bpm = cfg.export.bpm if cfg.export.bpm is not None else chart_bpm(chart)
        export_notes_to_midi(notes.all(), midi_out, cfg.export, bpm=bpm)
    return notes

def _bpm_arg(s: str) -> float:
    try:
        bpm = float(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {s!r}") from None
    if not valid_bpm(bpm):
        raise argparse.ArgumentTypeError(f"BPM out of range: {s}")
    return bpm

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="bmsnotes", description="Decode a BMS chart into notes")
    ap.add_argument('chart', help="path to a .bms/.bme/.bml/.pms file")
    ap.add_argument('--mapping', default='IIDX_P1', type=str.upper, choices=sorted(CHANNEL_MAPPING))
    ap.add_argument('--mapping-file', default=None, help="JSON channel -> column table")
    ap.add_argument('--json', dest='json_out', default=None, help="write notes as JSON")
    ap.add_argument('--midi', dest='midi_out', default=None, help="write a MIDI preview")
    ap.add_argument('--dump-mapping', dest='mapping_out', default=None, help="write the channel mapping used as JSON")
    ap.add_argument('--bpm', type=_bpm_arg, default=None)
    ap.add_argument('--seed', type=int, default=None, help="seed for #RANDOM")
    ap.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return ap

def main(argv: Optional[Sequence[str]] = None) -> int:
    setup_crashlog()
    args = build_parser().parse_args(argv)
    cfg = AppConfig(
        build=BuildConfig(mapping=args.mapping, mapping_file=args.mapping_file, seed=args.seed),
        export=ExportConfig(bpm=args.bpm),
        log=LogConfig(level=args.log_level),
    )
    _init_logging(cfg.log)

    try:
        notes = run(args.chart, cfg, json_out=args.json_out, midi_out=args.midi_out,
                    mapping_out=args.mapping_out)
    except (OSError, BMSSyntaxError, MappingError, NoteValidationError) as e:
        report = log_exception("bmsnotes", e)
        logger.error("%s (details in %s)", e, report)
        print(f"error: {e}", file=sys.stderr)
        return 1

    long_count = sum(1 for n in notes.all() if n.is_long)
    print(f"notes: {notes.count()}  playable: {len(notes.playable())}  long: {long_count}")
    return 0

if __name__ == '__main__':
    sys.exit(main())
