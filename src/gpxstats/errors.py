# gpxstats/errors

"""
gpxstats.errors

Central exception hierarchy for gpxstats.

Rationale:
  - Modules should raise specific, meaningful errors.
  - Callers can catch GPXStatsError (broad) or specific subclasses (narrow).
  - Missing values in track data are NOT errors; the analyzer degrades
    quietly and only structural problems end up here.
"""


class GPXStatsError(RuntimeError):
    """Base class for all gpxstats runtime errors."""


# ---- Configuration errors ----------------------

class ConfigError(GPXStatsError):
    """A config file could not be parsed or holds an unusable value."""


# ---- Ingestion / Selection errors --------------

class IngestError(GPXStatsError):
    """Errors while reading source documents."""

class InvalidGpxError(IngestError):
    """GPX file could not be parsed or did not contain expected data structures."""

class FzfNotFoundError(IngestError):
    """fzf is required but not available on PATH."""


# ---- Analysis errors ---------------------------

class AnalysisError(GPXStatsError):
    """Errors in the statistics pipeline."""

class AggregatorClosedError(AnalysisError):
    """Points were fed to an aggregator after it was finalized."""

class UnknownSeriesError(AnalysisError, ValueError):
    """A derived series was requested for an unknown metric or x-axis."""
