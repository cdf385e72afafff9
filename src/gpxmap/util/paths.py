# gpxmap/util/paths.py
from __future__ import annotations

from pathlib import Path
from typing import Optional
from shutil import which as _which

def ensure_dir(path: Path) -> None:
    """Ensure a directory exists."""
    path.mkdir(parents=True, exist_ok=True)

def list_gpx_files(root: Path) -> list[Path]:
    """Return the *.gpx files directly under `root`, sorted by name."""
    if not root.is_dir():
        return []
    return sorted(p for p in root.glob("*.gpx") if p.is_file())

def which(cmd: str) -> Optional[str]:
    return _which(cmd)
