"""
gpxmap configuration loader

This module centralizes *all* configuration handling for gpxmap.

Design goals:
- Keep the CLI Unix-friendly: flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/gpxmap/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by gpxmap.map_gpx)
2) Environment variables (GPXMAP_*)
3) User config: ~/.config/gpxmap/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults (./gpx in, ./svg/map.svg out)

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.

Sections:

    [paths]
    gpx_root = "~/GPS/_work"
    out_path = "~/GPS/map.svg"

    [map]
    epsilon = 0.5              # simplification tolerance, planar units
    distance_factor = 10000    # degrees -> planar units
    speed_factor = 100         # planar units / s -> speed units
    margin = 5                 # blank border around the drawing
    stroke_width = 3
    coordinate_precision = 2
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

from gpxmap.analyze.simplify import DEFAULT_EPSILON
from gpxmap.analyze.speed import SPEED_FACTOR
from gpxmap.errors import ConfigError
from gpxmap.geometry import COORDINATE_PRECISION, DISTANCE_FACTOR

# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise a ConfigError
      with a clear, user-facing message.

    Rationale:
    - Missing config files are normal and expected.
    - Malformed config files indicate user intent and should fail loudly.
    """
    if not path.is_file():
        return {}

    try:
        try:
            # Python 3.11+ standard library
            import tomllib
            return tomllib.loads(path.read_text(encoding="utf-8")) or {}
        except ModuleNotFoundError:
            import tomli
            return tomli.loads(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        # Wrap parsing errors with file context for usability
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "map.epsilon")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str):
        return Path(v).expanduser()
    return None


def _as_number(v: Any, key: str, *, integer: bool = False, minimum: float = 0.0) -> float:
    """
    Coerce a config or environment value into a non-negative number.

    Unlike paths, a bad number is never silently ignored: a typo in
    `epsilon` would otherwise produce a very different map without warning.
    """
    if isinstance(v, bool):
        raise ConfigError(f"{key}: expected a number, got {v!r}")
    try:
        num = int(v) if integer else float(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key}: expected a number, got {v!r}") from e
    if num < minimum:
        raise ConfigError(f"{key}: must be >= {minimum}, got {num}")
    return num


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the gpxmap repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class MapSettings:
    """
    Numeric knobs of the map pipeline.

    This object is what pipeline code should consume.
    """

    epsilon: float = DEFAULT_EPSILON
    distance_factor: float = DISTANCE_FACTOR
    speed_factor: float = SPEED_FACTOR
    margin: float = 5
    stroke_width: float = 3
    coordinate_precision: int = COORDINATE_PRECISION

    def with_overrides(self, **overrides: Any) -> "MapSettings":
        """Return a copy with the non-None `overrides` applied (CLI flags)."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


@dataclass(frozen=True)
class GpxMapPaths:
    """
    Canonical resolved filesystem paths used by gpxmap.
    """

    gpx_root: Path
    out_path: Path


@dataclass(frozen=True)
class GpxMapConfig:
    """
    Fully merged gpxmap configuration.

    Attributes:
    - paths: input directory and output file
    - map: pipeline settings
    - source: provenance map showing where each value came from
    """

    paths: GpxMapPaths
    map: MapSettings
    source: dict[str, str]


_MAP_KEYS = {f.name: f.name == "coordinate_precision" for f in fields(MapSettings)}

_ENV_MAP = {
    "GPXMAP_GPX_ROOT": "paths.gpx_root",
    "GPXMAP_OUT_PATH": "paths.out_path",
    "GPXMAP_EPSILON": "map.epsilon",
    "GPXMAP_DISTANCE_FACTOR": "map.distance_factor",
    "GPXMAP_SPEED_FACTOR": "map.speed_factor",
}


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> GpxMapConfig:
    """
    Load, merge, and normalize all gpxmap configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "gpxmap" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------
    gpx_root = Path("gpx")
    out_path = Path("svg") / "map.svg"
    map_values: dict[str, Any] = {}

    # Track provenance for debugging
    src = {"paths.gpx_root": "default", "paths.out_path": "default"}
    src.update({f"map.{k}": "default" for k in _MAP_KEYS})

    # ------------------------------------------------------------------
    # Repo + user overrides (user wins)
    # ------------------------------------------------------------------
    for cfg, label, cfg_path in ((repo_cfg, "repo", repo_config_path),
                                 (user_cfg, "user", user_config_path)):
        for k in ("paths.gpx_root", "paths.out_path"):
            v = _as_path(_deep_get(cfg, k))
            if v is None:
                continue
            if k == "paths.gpx_root":
                gpx_root = v
            else:
                out_path = v
            src[k] = f"{label}:{cfg_path}"

        for name, integer in _MAP_KEYS.items():
            raw = _deep_get(cfg, f"map.{name}")
            if raw is None:
                continue
            map_values[name] = _as_number(raw, f"map.{name}", integer=integer)
            src[f"map.{name}"] = f"{label}:{cfg_path}"

    # Environment variable overrides (highest non-CLI precedence)
    for env, key in _ENV_MAP.items():
        val = os.environ.get(env)
        if not val:
            continue
        section, name = key.split(".", 1)
        if section == "paths":
            if name == "gpx_root":
                gpx_root = Path(val).expanduser()
            else:
                out_path = Path(val).expanduser()
        else:
            map_values[name] = _as_number(val, env, integer=_MAP_KEYS[name])
        src[key] = f"env:{env}"

    paths = GpxMapPaths(gpx_root=gpx_root.expanduser(), out_path=out_path.expanduser())
    return GpxMapConfig(paths=paths, map=MapSettings(**map_values), source=src)
