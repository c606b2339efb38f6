from __future__ import annotations

import logging
import os
from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidStructureError

_LOGGER = logging.getLogger("chordsynth.config")

SectionName = Literal["intro", "verse", "chorus", "bridge", "outro"]
SECTION_NAMES: tuple[SectionName, ...] = ("intro", "verse", "chorus", "bridge", "outro")
SequenceSource = Literal["analysis", "synthesized"]


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _LOGGER.warning("Ignoring invalid %s=%r; using %s.", name, value, default)
        return default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        _LOGGER.warning("Ignoring invalid %s=%r; using %s.", name, value, default)
        return default


def _env_str(name: str, default: str) -> str:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip()


DEFAULT_MIN_SAMPLES = 10
DEFAULT_DURATION_HINT = 180.0
DEFAULT_ANALYSIS_URL = "http://localhost:8000/api/chords/analyze"
DEFAULT_ANALYSIS_TIMEOUT = 60.0


def min_samples_threshold() -> int:
    return max(1, _env_int("CHORDSYNTH_MIN_SAMPLES", DEFAULT_MIN_SAMPLES))


def duration_hint() -> float:
    return _env_float("CHORDSYNTH_DURATION_HINT", DEFAULT_DURATION_HINT)


def analysis_url() -> str:
    return _env_str("CHORDSYNTH_ANALYSIS_URL", DEFAULT_ANALYSIS_URL)


def analysis_timeout() -> float:
    return _env_float("CHORDSYNTH_ANALYSIS_TIMEOUT", DEFAULT_ANALYSIS_TIMEOUT)


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1).

    ``random.Random`` and ``numpy.random.Generator`` both qualify.
    """

    def random(self) -> float: ...


class ChordEvent(BaseModel):
    """One chord to sound, in seconds relative to media start."""

    chord: str = Field(min_length=1)
    start_time: float = Field(ge=0.0)
    duration: float = Field(ge=0.5)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def to_playback(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SilencePeriod(BaseModel):
    """Half-open window ``[start, end)`` during which no chord should sound."""

    start: float = Field(ge=0.0)
    end: float

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_order(self) -> SilencePeriod:
        if self.start >= self.end:
            raise ValueError(f"silence period start ({self.start}) must be before end ({self.end})")
        return self

    def contains(self, time: float) -> bool:
        return self.start <= time < self.end


class SongStructure(BaseModel):
    """Named song template: five chord sections plus silence windows."""

    name: str
    intro: tuple[str, ...] = Field(min_length=1)
    verse: tuple[str, ...] = Field(min_length=1)
    chorus: tuple[str, ...] = Field(min_length=1)
    bridge: tuple[str, ...] = Field(min_length=1)
    outro: tuple[str, ...] = Field(min_length=1)
    silence_periods: tuple[SilencePeriod, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("intro", "verse", "chorus", "bridge", "outro")
    @classmethod
    def _validate_symbols(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not symbol.strip() for symbol in value):
            raise ValueError("chord symbols must be non-empty")
        return value

    def section(self, name: str) -> tuple[str, ...]:
        if name not in SECTION_NAMES:
            raise InvalidStructureError(f"Unknown section: {name!r}")
        return getattr(self, name)

    def section_lengths(self) -> dict[str, int]:
        return {name: len(self.section(name)) for name in SECTION_NAMES}


class RawSample(BaseModel):
    """A (chord, time) observation from the analysis service."""

    chord: str = Field(min_length=1)
    time: float = Field(ge=0.0)

    model_config = ConfigDict(frozen=True, extra="ignore")


class GenerateResult(BaseModel):
    """Chord sequence handed to playback, plus how it was produced."""

    events: tuple[ChordEvent, ...]
    source: SequenceSource
    structure: str | None = None
    advisory: str | None = None
    sample_count: int = Field(default=0, ge=0)
    duration_hint: float | None = None
    video_id: str = ""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def total_duration(self) -> float:
        if not self.events:
            return 0.0
        return max(event.end_time for event in self.events)

    def to_playback(self) -> list[dict[str, Any]]:
        return [event.to_playback() for event in self.events]
