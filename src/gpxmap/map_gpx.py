#!/usr/bin/env python3
"""
map_gpx: render one or more GPX tracks as a single speed-colored SVG map.

Each track is simplified, all tracks are placed into one shared drawing frame
(north up), and every segment is colored from blue (slowest) to red (fastest)
relative to the whole batch. Overlapping tracks are drawn semi-transparent so
frequently travelled routes stand out.

Input selection (first match wins):
  1) GPX files given on the command line
  2) --select: pick files interactively with fzf
  3) every *.gpx directly under --gpx-root (or the configured gpx_root)
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from gpxmap.analyze.track import TSV_HEADER, analyze_track, format_report
from gpxmap.config import load_config
from gpxmap.errors import TrackError
from gpxmap.formats.gpx import extract_trackpoints, iter_track_samples, read_gpx, track_name
from gpxmap.formats.svg import SvgRenderer
from gpxmap.pipeline import TrackFailure, render, run_batch
from gpxmap.util.fzf import fzf_select_gpx
from gpxmap.util.logging import log
from gpxmap.util.paths import list_gpx_files


def load_batch(paths: Sequence[Path], *, stats: bool = False, tsv: bool = False):
    """
    Read every GPX file into (track_id, raw samples).

    Samples are passed on unvalidated: a corrupt trackpoint is rejected by the
    pipeline, which excludes that one track. A file that cannot be read or is
    not XML is skipped here and reported; it never aborts the batch.
    """
    batch = []
    failures: list[TrackFailure] = []

    for path in paths:
        track_id = path.stem
        try:
            tree = read_gpx(path)
        except (TrackError, OSError) as e:
            log(f"Skipping {path}: {e}", indent=1)
            error = e if isinstance(e, TrackError) else TrackError(str(e))
            failures.append(TrackFailure(track_id=track_id, error=error))
            continue

        name = track_name(tree)
        log(f"Read {path}" + (f" ({name})" if name else ""), indent=1)

        if stats:
            try:
                print(format_report(str(path), analyze_track(extract_trackpoints(tree)), tsv=tsv))
            except TrackError as e:
                log(f"No statistics for {path}: {e}", indent=2)

        batch.append((track_id, list(iter_track_samples(tree))))

    return batch, failures


def main(argv: Optional[Sequence[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="gpxmap: Render GPX tracks as a speed-colored SVG map.")
    ap.add_argument("gpx", nargs="*",
                    help="One or more GPX files. If omitted, use every *.gpx under --gpx-root.")
    ap.add_argument("--gpx-root", default=None,
                    help="Directory of GPX files (default: from gpxmap config or ./gpx)")
    ap.add_argument("--out", default=None,
                    help="Output SVG path (default: from gpxmap config or ./svg/map.svg)")
    ap.add_argument("--epsilon", type=float, default=None,
                    help="Simplification tolerance in planar units (default: from config, 0.5)")
    ap.add_argument("--select", action="store_true",
                    help="Pick GPX files interactively with fzf.")
    ap.add_argument("--stats", action="store_true",
                    help="Print distance/duration/speed statistics per track.")
    ap.add_argument("--tsv", action="store_true",
                    help="With --stats: print tab-separated output (good for piping).")
    ap.add_argument("--preview", action="store_true",
                    help="Show a matplotlib preview after writing the SVG.")

    args = ap.parse_args(argv)
    cfg = load_config()

    if args.epsilon is not None and args.epsilon < 0:
        ap.error("--epsilon must be >= 0")
    settings = cfg.map.with_overrides(epsilon=args.epsilon)
    out_path = Path(args.out).expanduser() if args.out else cfg.paths.out_path

    log("Mapping GPX files to SVG")

    if args.gpx:
        selected = [Path(p).expanduser() for p in args.gpx]
    else:
        gpx_root = Path(args.gpx_root).expanduser() if args.gpx_root else cfg.paths.gpx_root
        gpx_files = list_gpx_files(gpx_root)
        if not gpx_files:
            raise SystemExit(f"No GPX files found under {gpx_root}")
        if args.select:
            selected = fzf_select_gpx(gpx_files, header="Select GPX file(s) to map:", multi=True)
        else:
            selected = gpx_files

    if not selected:
        log("Nothing selected.")
        return 0

    if args.stats and args.tsv:
        print(TSV_HEADER)

    batch, failures = load_batch(selected, stats=args.stats, tsv=args.tsv)
    result = run_batch(batch, settings)
    result.failures[:0] = failures

    if not result.tracks:
        log("No track could be mapped.")
        return 1

    renderer = SvgRenderer()
    render(result, renderer)
    renderer.write(out_path)
    log(f"Wrote: {out_path} ({len(result.segments)} segment(s), {len(result.tracks)} track(s))")

    for failure in result.failures:
        log(f"Failed: {failure.track_id}: {failure.error}")

    if args.preview:
        from gpxmap.visualize.plot import plot_segments
        plot_segments(result)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
