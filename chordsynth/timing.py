"""Assign start times and durations to an assembled chord progression.

Durations are drawn per chord from a distribution that depends on which
section the chord sits in. Silence windows consume chords: while the running
clock is inside a window, symbols are skipped and the clock moves forward by
a short fixed gap. A final pass drops any event whose whole span is silent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import numpy as np

from .config import ChordEvent, RandomSource, SilencePeriod, SongStructure

_LOGGER = logging.getLogger("chordsynth.timing")

SILENCE_STEP_SECONDS = 2.0
SILENCE_RESOLUTION_SECONDS = 0.5


def is_in_silence(time: float, periods: Iterable[SilencePeriod]) -> bool:
    return any(period.contains(time) for period in periods)


def pick_duration(
    index: int,
    total: int,
    structure: SongStructure,
    rng: RandomSource,
) -> float:
    """Duration in seconds for the chord at ``index`` of a ``total``-long progression."""
    intro_len = len(structure.intro)
    outro_len = len(structure.outro)
    verse_end = intro_len + 2 * len(structure.verse)

    r = float(rng.random())
    if index < intro_len:
        return 8.0 if r > 0.5 else 6.0
    if index >= total - outro_len:
        return 8.0 if r > 0.3 else 6.0
    if index < verse_end:
        return 2.0 if r > 0.8 else 4.0
    # chorus and bridge
    if r > 0.9:
        return 2.0
    if r > 0.7:
        return 8.0
    return 4.0


def _has_audible_instant(event: ChordEvent, periods: Sequence[SilencePeriod]) -> bool:
    t = event.start_time
    end = event.end_time
    while t < end:
        if not is_in_silence(t, periods):
            return True
        t += SILENCE_RESOLUTION_SECONDS
    return False


def filter_silent_events(
    events: Sequence[ChordEvent],
    periods: Sequence[SilencePeriod],
) -> list[ChordEvent]:
    """Drop events with no audible instant, sampled every half second."""
    if not periods:
        return list(events)
    return [event for event in events if _has_audible_instant(event, periods)]


def synthesize(
    symbols: Sequence[str],
    structure: SongStructure,
    *,
    rng: RandomSource | None = None,
) -> list[ChordEvent]:
    source: RandomSource = rng if rng is not None else np.random.default_rng()
    periods = structure.silence_periods
    total = len(symbols)

    candidates: list[ChordEvent] = []
    clock = 0.0
    for index, symbol in enumerate(symbols):
        if periods and is_in_silence(clock, periods):
            _LOGGER.debug("Skipping chord %s at %ss - in silence period", symbol, clock)
            clock += SILENCE_STEP_SECONDS
            continue
        duration = pick_duration(index, total, structure, source)
        candidates.append(ChordEvent(chord=symbol, start_time=clock, duration=duration))
        clock += duration

    events = filter_silent_events(candidates, periods)
    _LOGGER.info(
        "Generated chord progression: %d chords, total duration: %ss",
        len(events),
        clock,
    )
    dropped = len(candidates) - len(events)
    if dropped:
        _LOGGER.debug("Filtered out %d chords in silence periods", dropped)
    _LOGGER.debug("Structure used: %s", structure.section_lengths())
    return events
