from __future__ import annotations


class ChordSynthError(Exception):
    """Base error for the chordsynth library."""


class FetchError(ChordSynthError):
    """Raised when the chord-analysis service call fails."""


class InsufficientDataError(ChordSynthError):
    """Raised when analysis returns fewer samples than the selection threshold."""

    def __init__(self, count: int, threshold: int) -> None:
        super().__init__(f"analysis returned {count} samples; need at least {threshold}")
        self.count = count
        self.threshold = threshold


class InvalidStructureError(ChordSynthError):
    """Raised when a song structure or section name cannot be used."""
