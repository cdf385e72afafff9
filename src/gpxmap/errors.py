# gpxmap/errors

"""
gpxmap.errors

Central exception hierarchy for gpxmap.

Rationale:
  - Modules should raise specific, meaningful errors.
  - Callers can catch GpxMapError (broad) or specific subclasses (narrow).
  - Degenerate geometry and clock skew are NOT errors; they are handled
    where they occur and never surface here.
"""


class GpxMapError(RuntimeError):
    """Base class for all gpxmap runtime errors."""


# ---- Track / input errors ----------------------

class TrackError(GpxMapError):
    """Errors tied to a single track; the batch excludes the track and continues."""

class InvalidTrackError(TrackError):
    """A sample is missing a coordinate or timestamp, or cannot be parsed."""

class InvalidGpxError(TrackError):
    """GPX file could not be parsed or did not contain expected data structures."""


# ---- Pipeline contract errors ------------------

class UnsetBoundsError(GpxMapError):
    """Bounds were read before any point was observed (caller bug, not a data fault)."""


# ---- Configuration errors ----------------------

class ConfigError(GpxMapError):
    """Configuration file or value could not be interpreted."""


# ---- Selection errors --------------------------

class SelectionError(GpxMapError):
    """Interactive file selection failed."""

class FzfNotFoundError(SelectionError):
    """fzf is required but not available on PATH."""
