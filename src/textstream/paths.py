from __future__ import annotations

from pathlib import Path

CONFIG_FILENAME = "textstream.yaml"


def find_config_file(start: Path | None = None) -> Path | None:
    """Find textstream.yaml by walking up from `start` (default: the cwd).

    This keeps behavior predictable when invoking `textstream` from subdirectories.
    """

    cur = (start or Path.cwd()).resolve()
    for p in [cur, *cur.parents]:
        candidate = p / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
