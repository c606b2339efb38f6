from __future__ import annotations

from .adapter import adapt
from .catalog import DEFAULT, HOTEL_CALIFORNIA, STRUCTURES, WONDERWALL, select_structure
from .config import (
    ChordEvent,
    GenerateResult,
    RandomSource,
    RawSample,
    SilencePeriod,
    SongStructure,
)
from .errors import ChordSynthError, FetchError, InsufficientDataError, InvalidStructureError
from .logging_utils import configure_logging as _configure_logging
from .main import GenerateEvent, GenerateHooks, generate, generate_chord_sequence
from .progression import SECTION_ORDER, assemble
from .sources import AnalysisServiceSpec, ChordFetcher, extract_video_id
from .timing import synthesize

__all__ = [
    "DEFAULT",
    "HOTEL_CALIFORNIA",
    "SECTION_ORDER",
    "STRUCTURES",
    "WONDERWALL",
    "AnalysisServiceSpec",
    "ChordEvent",
    "ChordFetcher",
    "ChordSynthError",
    "FetchError",
    "GenerateEvent",
    "GenerateHooks",
    "GenerateResult",
    "InsufficientDataError",
    "InvalidStructureError",
    "RandomSource",
    "RawSample",
    "SilencePeriod",
    "SongStructure",
    "adapt",
    "assemble",
    "extract_video_id",
    "generate",
    "generate_chord_sequence",
    "select_structure",
    "synthesize",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
