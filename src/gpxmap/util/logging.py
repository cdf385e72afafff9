# gpxmap/util/logging.py
from __future__ import annotations

import datetime

def log(msg: str, *, indent: int = 0) -> None:
    """Print a timestamped log line (local time with timezone)."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {'  ' * indent}{msg}")
