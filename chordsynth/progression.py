from __future__ import annotations

import logging

from .config import SectionName, SongStructure

_LOGGER = logging.getLogger("chordsynth.progression")

# Generic song form used for every structure.
SECTION_ORDER: tuple[SectionName, ...] = (
    "intro",
    "verse",
    "chorus",
    "verse",
    "chorus",
    "bridge",
    "chorus",
    "outro",
)


def assemble(structure: SongStructure) -> list[str]:
    progression: list[str] = []
    for name in SECTION_ORDER:
        progression.extend(structure.section(name))
        _LOGGER.debug("After %s: %d chords", name, len(progression))
    _LOGGER.debug("Final progression length: %d chords", len(progression))
    return progression
