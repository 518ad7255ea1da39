from __future__ import annotations

import time
from pathlib import Path
from typing import AsyncIterator, Iterable


def timestamp_ms() -> int:
    """Current Unix time in whole milliseconds."""
    return int(time.time() * 1000)


async def make_async_iterator(
    iterable: Iterable[bytes],
) -> AsyncIterator[bytes]:
    for item in iterable:
        yield item


def ensure_cache_dict(base_path: Path | None = None) -> Path:
    _base_path = base_path if base_path is not None else Path(".cache/swrcache")
    _gitignore_file = _base_path / ".gitignore"

    _base_path.mkdir(parents=True, exist_ok=True)

    if not _gitignore_file.is_file():
        with open(_gitignore_file, "w", encoding="utf-8") as f:
            f.write("# Automatically created by swrcache\n*")
    return _base_path
