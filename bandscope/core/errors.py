"""Exceptions and warnings raised by bandscope."""

from typing import Optional


class BandscopeError(Exception):
    """Base class for bandscope errors."""


class InvalidFrame(BandscopeError, ValueError):
    """A spectral frame or band reading could not be used for a tick.

    Attributes:
        band: Band the reading belonged to, or None when the whole
            frame was rejected.
    """

    def __init__(self, message: str, band: Optional[str] = None):
        super().__init__(message)
        self.band = band


class AnalysisTimeout(BandscopeError):
    """Batch analysis of a file did not finish in time."""


class SeparationError(BandscopeError):
    """Stem separation failed."""


class ConfigurationWarning(UserWarning):
    """A band configuration looks wrong for the signal being analysed."""


class EmptyFrequencyRange(ConfigurationWarning):
    """A band maps to no frequency bins at the current sample rate."""
