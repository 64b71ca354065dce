from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from .paths import find_config_file
from .reader import CHUNK_SIZE, MIN_CHUNK_SIZE

log = logging.getLogger(__name__)


@dataclass
class ReaderConfig:
    # Any label Python's codec registry knows ("sjis", "euc-jp", "cp1252", ...).
    encoding: str = "utf-8"

    # strict|replace|ignore, or the name of a registered codecs error handler.
    trap: str = "strict"

    chunk_size: int = CHUNK_SIZE


def _as_str(v: Any) -> str | None:
    return v if isinstance(v, str) and v else None


def _as_chunk_size(v: Any) -> int | None:
    # bool is an int subclass; `chunk_size: yes` is not a size.
    if isinstance(v, int) and not isinstance(v, bool) and v >= MIN_CHUNK_SIZE:
        return v
    return None


def load_reader_config(path: Path | None = None) -> ReaderConfig:
    """Load reader settings from YAML; missing files and bad values give defaults.

    Without an explicit path, textstream.yaml is looked up from the cwd upwards.
    """

    if path is None:
        path = find_config_file()

    data: dict[str, Any] = {}
    if path is not None and path.exists():
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            data = loaded
        elif loaded is not None:
            log.warning("ignoring %s: expected a mapping, got %s", path, type(loaded).__name__)

    cfg = ReaderConfig()
    cfg.encoding = _as_str(data.get("encoding")) or cfg.encoding
    cfg.trap = _as_str(data.get("trap")) or cfg.trap

    chunk_size = data.get("chunk_size")
    if chunk_size is not None and _as_chunk_size(chunk_size) is None:
        log.warning("ignoring chunk_size %r in %s", chunk_size, path)
    cfg.chunk_size = _as_chunk_size(chunk_size) or cfg.chunk_size

    return cfg
