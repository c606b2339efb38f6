from __future__ import annotations

import logging
from collections.abc import Sequence

from .config import ChordEvent, RawSample

_LOGGER = logging.getLogger("chordsynth.adapter")

LAST_SAMPLE_SECONDS = 4.0
MIN_DURATION_SECONDS = 0.5


def adapt(samples: Sequence[RawSample]) -> list[ChordEvent]:
    """Turn analysis samples into chord events.

    Each sample lasts until the next one starts; the last lasts four seconds.
    Durations never drop below half a second.
    """
    events: list[ChordEvent] = []
    for index, sample in enumerate(samples):
        if index + 1 < len(samples):
            duration = samples[index + 1].time - sample.time
        else:
            duration = LAST_SAMPLE_SECONDS
        events.append(
            ChordEvent(
                chord=sample.chord,
                start_time=sample.time,
                duration=max(MIN_DURATION_SECONDS, duration),
            )
        )
    _LOGGER.debug("Converted %d analysis samples to chord events", len(events))
    return events
