from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable


def dump_json(path: str | Path, obj: Dict[str, Any], *, indent: int = 2) -> Path:
    """Write JSON atomically via a temp file in the same directory."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_name(f".{p.name}.{os.getpid()}.tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(obj, f, ensure_ascii=False, indent=indent)
    os.replace(tmp, p)
    return p


def append_jsonl(path: str | Path, rows: Iterable[Dict[str, Any]]) -> int:
    """Append rows as JSON lines; returns the number of rows written."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    n = 0
    with p.open("a", encoding="utf-8") as f:
        for row in rows:
            f.write(json.dumps(row, ensure_ascii=False) + "\n")
            n += 1
    return n
