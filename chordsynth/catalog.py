"""Static song structure catalog and title matching."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType

from .config import SilencePeriod, SongStructure

_LOGGER = logging.getLogger("chordsynth.catalog")

HOTEL_CALIFORNIA = SongStructure(
    name="hotel_california",
    intro=("Am", "E", "G", "D", "F", "C", "Dm", "E"),
    verse=("Am", "E", "G", "D", "F", "C", "Dm", "E"),
    chorus=("F", "C", "E", "Am", "F", "C", "Dm", "E"),
    bridge=("Am", "E", "G", "D", "F", "C", "Dm", "E"),
    outro=("Am", "E", "G", "D", "F", "C", "Dm", "E", "Am"),
    silence_periods=(
        SilencePeriod(start=0, end=8),  # quiet intro
        SilencePeriod(start=120, end=125),  # mid-song pause
        SilencePeriod(start=200, end=210),  # outro fade
    ),
)

WONDERWALL = SongStructure(
    name="wonderwall",
    intro=("Em7", "G", "D", "C"),
    verse=("Em7", "G", "D", "C", "Em7", "G", "D", "C"),
    chorus=("C", "D", "G", "Em7", "C", "D", "G", "G"),
    bridge=("C", "D", "G", "Em7", "C", "D", "Em7", "Em7"),
    outro=("Em7", "G", "D", "C", "Em7"),
    silence_periods=(
        SilencePeriod(start=0, end=4),
        SilencePeriod(start=180, end=190),
    ),
)

DEFAULT = SongStructure(
    name="default",
    intro=("C", "G", "Am", "F"),
    verse=("C", "G", "Am", "F", "C", "G", "F", "C"),
    chorus=("F", "C", "G", "Am", "F", "C", "G", "G"),
    bridge=("Am", "F", "C", "G", "Am", "F", "G", "G"),
    outro=("C", "G", "Am", "F", "C"),
    silence_periods=(
        SilencePeriod(start=0, end=2),
        SilencePeriod(start=160, end=170),
    ),
)

STRUCTURES: Mapping[str, SongStructure] = MappingProxyType(
    {structure.name: structure for structure in (HOTEL_CALIFORNIA, WONDERWALL, DEFAULT)}
)

# Checked in order; first keyword found in the lower-cased title wins.
_TITLE_KEYWORDS: tuple[tuple[tuple[str, ...], SongStructure], ...] = (
    (("hotel", "california"), HOTEL_CALIFORNIA),
    (("wonderwall",), WONDERWALL),
)


def select_structure(title: str) -> SongStructure:
    """Pick the catalog structure whose keywords appear in ``title``.

    Matching is a case-insensitive substring test in fixed priority order.
    Titles that match nothing resolve to :data:`DEFAULT`.
    """
    lowered = title.lower()
    for keywords, structure in _TITLE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            _LOGGER.info("Using %s structure for %r", structure.name, title)
            return structure
    _LOGGER.info("Using default structure for %r", title)
    return DEFAULT

