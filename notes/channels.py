# ========================= notes/channels.py =========================
import json
from typing import Dict, Mapping, Optional
from notes.errors import MappingError

# 7 鍵 + 轉盤，1P 側
IIDX_P1: Dict[str, str] = {
    "16": "SC",
    "11": "1",
    "12": "2",
    "13": "3",
    "14": "4",
    "15": "5",
    "18": "6",
    "19": "7",
}

# 雙打：2P 側接在 1P 之後
IIDX_DP: Dict[str, str] = {
    **IIDX_P1,
    "21": "8",
    "22": "9",
    "23": "10",
    "24": "11",
    "25": "12",
    "28": "13",
    "29": "14",
    "26": "SC2",
}

# 9 鍵 (PMS)
PMS: Dict[str, str] = {
    "11": "1",
    "12": "2",
    "13": "3",
    "14": "4",
    "15": "5",
    "22": "6",
    "23": "7",
    "24": "8",
    "25": "9",
}

CHANNEL_MAPPING: Dict[str, Dict[str, str]] = {
    "IIDX_P1": IIDX_P1,
    "IIDX_DP": IIDX_DP,
    "PMS": PMS,
}

DEFAULT_MAPPING = "IIDX_P1"

def get_preset(name: str) -> Dict[str, str]:
    """Return a copy of the named preset (case-insensitive)."""
    try:
        return dict(CHANNEL_MAPPING[name.upper()])
    except KeyError:
        known = ", ".join(sorted(CHANNEL_MAPPING))
        raise MappingError(f"Unknown channel mapping: {name} (known: {known})") from None

def serialize_mapping(mapping: Mapping[str, str]) -> dict:
    """Sorted by channel so saved files diff cleanly."""
    return {ch: mapping[ch] for ch in sorted(mapping)}

def deserialize_mapping(obj) -> Dict[str, str]:
    if not isinstance(obj, dict):
        raise MappingError(f"Channel mapping must be a JSON object, got {type(obj).__name__}")
    out: Dict[str, str] = {}
    for ch, column in obj.items():
        if not isinstance(column, str) or not column:
            raise MappingError(f"Column for channel {ch!r} must be a non-empty string")
        out[str(ch).upper()] = column
    return out

def save_mapping_json(mapping: Mapping[str, str], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(serialize_mapping(mapping), f, ensure_ascii=False, indent=2)

def load_mapping_json(path: str) -> Dict[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            obj = json.load(f)
        except json.JSONDecodeError as e:
            raise MappingError(f"{path}: not valid JSON ({e})") from e
    return deserialize_mapping(obj)

def resolve_mapping(name: Optional[str] = None, path: Optional[str] = None) -> Dict[str, str]:
    """A mapping file wins over a preset name."""
    if path:
        return load_mapping_json(path)
    return get_preset(name or DEFAULT_MAPPING)
