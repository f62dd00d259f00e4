"""orjson-backed JSON and JSON Lines I/O."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson


def dumps_json(obj: Any, *, pretty: bool = True) -> bytes:
    """Serialize ``obj`` with sorted keys, indented unless ``pretty`` is False."""
    opts = orjson.OPT_SORT_KEYS
    if pretty:
        opts |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, option=opts)


def save_jsonl(records: list[dict[str, Any]], path: Path) -> None:
    """Save a list of dicts as a JSON Lines file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [orjson.dumps(r, option=orjson.OPT_SORT_KEYS) for r in records]
    path.write_bytes(b"\n".join(lines) + (b"\n" if lines else b""))
