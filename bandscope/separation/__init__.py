"""Optional stem separation.

Uses Demucs when torch and demucs are installed, otherwise a band-filter
approximation. Separation is best-effort: failures come back as a failed
SeparationOutcome and never stop band-energy detection.
"""

from .stems import StemSeparator, SeparationOutcome, StemAudio

__all__ = [
    "StemSeparator",
    "SeparationOutcome",
    "StemAudio",
]
