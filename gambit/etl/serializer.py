# gambit/etl/serializer.py
"""Flatten the CounterTable into the blob the UI loads.

Blob shape:
    {"eventsByMove": [{"name": "total", "data": [12, 11, ...]}, ...]}

Written either as plain JSON (".json") or as a script the browser can
load directly ("const DATA = {...};"), which is the default.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Union

from .counters import CounterTable

logger = logging.getLogger(__name__)

EVENTS_KEY = "eventsByMove"
JS_PREFIX = "const DATA = "
JS_SUFFIX = ";"

Blob = dict[str, list[dict[str, Any]]]


def to_blob(table: CounterTable) -> Blob:
    return {EVENTS_KEY: table.to_list()}


def dumps(blob: Blob, as_script: bool = False) -> str:
    text = json.dumps(blob, separators=(",", ":"))
    if as_script:
        return f"{JS_PREFIX}{text}{JS_SUFFIX}"
    return text


def loads(text: str) -> Blob:
    """Parse either blob format and check its shape."""
    text = text.strip()
    if text.startswith(JS_PREFIX):
        text = text[len(JS_PREFIX):]
        if text.endswith(JS_SUFFIX):
            text = text[: -len(JS_SUFFIX)]

    try:
        blob = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Blob is not valid JSON: {e}") from e

    if not isinstance(blob, dict) or not isinstance(blob.get(EVENTS_KEY), list):
        raise ValueError(f"Blob has no {EVENTS_KEY!r} list")
    for entry in blob[EVENTS_KEY]:
        if not isinstance(entry, dict) or "name" not in entry or "data" not in entry:
            raise ValueError(f"Malformed {EVENTS_KEY} entry: {entry!r}")
    return blob


def write_blob(path: Union[str, Path], blob: Blob) -> Path:
    path = Path(path)
    as_script = path.suffix.lower() != ".json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps(blob, as_script=as_script), encoding="utf-8")
    logger.info("Wrote %d counters to %s", len(blob[EVENTS_KEY]), path)
    return path


def load_blob(path: Union[str, Path]) -> Blob:
    return loads(Path(path).read_text(encoding="utf-8"))
