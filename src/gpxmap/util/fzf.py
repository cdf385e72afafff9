# gpxmap/util/fzf.py
"""
Interactive GPX selection with `fzf`.

Each candidate is listed as "<file name>  [<track name>]" so tracks can be
found by what they were called on the device, not only by file name.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from gpxmap.errors import FzfNotFoundError, GpxMapError, SelectionError
from gpxmap.formats.gpx import read_gpx, track_name
from gpxmap.util.paths import which

# fzf exit codes that mean "nothing picked" rather than failure
_NO_MATCH = 1
_ABORTED = 130


def gpx_label(path: Path) -> str:
    """Display label for one GPX file; unreadable files show by name only."""
    try:
        name = track_name(read_gpx(path))
    except (GpxMapError, OSError):
        name = None
    if not name:
        return path.name
    return f"{path.name}  [{' '.join(name.split())}]"


def fzf_select_gpx(paths: list[Path], *, header: str, multi: bool = True) -> list[Path]:
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass GPX files explicitly.")

    # field 1 is shown and searched, field 2 carries the path back out
    input_text = "".join(f"{gpx_label(p)}\t{p}\n" for p in paths)

    cmd = [
        "fzf",
        "--delimiter=\t",
        "--with-nth=1",
        "--nth=1",
        "--height=60%",
        "--layout=reverse",
        "--border",
        "--prompt=gpx> ",
        "--header", header,
    ]
    if multi:
        cmd.append("--multi")

    proc = subprocess.run(cmd, input=input_text, capture_output=True, text=True)

    if proc.returncode in (_NO_MATCH, _ABORTED):
        return []
    if proc.returncode != 0:
        raise SelectionError(f"fzf failed ({proc.returncode}): {proc.stderr.strip()}")

    return [
        Path(line.rsplit("\t", 1)[-1]).expanduser().resolve()
        for line in proc.stdout.splitlines()
        if line.strip()
    ]
