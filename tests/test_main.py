from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import numpy as np
import pytest

import chordsynth.sources as sources
from chordsynth import (
    GenerateEvent,
    GenerateHooks,
    GenerateResult,
    HOTEL_CALIFORNIA,
    FetchError,
    RawSample,
    generate,
    generate_chord_sequence,
)

_URL = "https://www.youtube.com/watch?v=BciS5krYL80&t=10"


class StubFetcher:
    def __init__(
        self,
        samples: Sequence[RawSample] = (),
        *,
        error: BaseException | None = None,
    ) -> None:
        self.samples = list(samples)
        self.error = error
        self.calls: list[str] = []
        self.closed = False

    async def fetch(self, url: str) -> Sequence[RawSample]:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.samples

    async def aclose(self) -> None:
        self.closed = True


def _evenly_spaced(count: int, gap: float = 2.0) -> list[RawSample]:
    return [RawSample(chord="G", time=gap * index) for index in range(count)]


@pytest.mark.asyncio
async def test_threshold_count_uses_analysis() -> None:
    fetcher = StubFetcher(_evenly_spaced(10))
    result = await generate_chord_sequence("Yesterday", _URL, fetcher=fetcher)

    assert fetcher.calls == [_URL]
    assert result.source == "analysis"
    assert result.sample_count == 10
    assert len(result.events) == 10
    assert result.structure is None
    assert result.advisory is None


@pytest.mark.asyncio
async def test_below_threshold_falls_back_without_advisory() -> None:
    fetcher = StubFetcher(_evenly_spaced(9))
    result = await generate_chord_sequence("Hotel California", _URL, fetcher=fetcher, seed=1)

    assert result.source == "synthesized"
    assert result.structure == HOTEL_CALIFORNIA.name
    assert result.sample_count == 9
    assert result.advisory is None
    assert result.duration_hint == 180.0
    assert result.events


@pytest.mark.asyncio
async def test_yesterday_with_fifteen_samples() -> None:
    fetcher = StubFetcher(_evenly_spaced(15))
    result = await generate_chord_sequence("Yesterday", _URL, fetcher=fetcher)

    assert len(result.events) == 15
    assert [event.duration for event in result.events[:14]] == [2.0] * 14
    assert result.events[-1].start_time == 28.0
    assert result.events[-1].duration == 4.0


@pytest.mark.asyncio
async def test_fetch_failure_returns_fallback_and_advisory() -> None:
    fetcher = StubFetcher(error=FetchError("network down"))
    result = await generate_chord_sequence(
        "Hotel California (Remastered)", _URL, fetcher=fetcher, seed=3
    )

    assert result.source == "synthesized"
    assert result.structure == "hotel_california"
    assert result.advisory == "network down"
    assert result.events[0].start_time >= 8.0


@pytest.mark.asyncio
async def test_unexpected_error_without_message_uses_generic_advisory() -> None:
    fetcher = StubFetcher(error=RuntimeError())
    result = await generate_chord_sequence("Wonderwall", _URL, fetcher=fetcher)

    assert result.structure == "wonderwall"
    assert result.advisory == "Analysis failed"
    assert result.events


@pytest.mark.asyncio
async def test_cancellation_propagates() -> None:
    fetcher = StubFetcher(error=asyncio.CancelledError())
    with pytest.raises(asyncio.CancelledError):
        await generate_chord_sequence("Wonderwall", _URL, fetcher=fetcher)


@pytest.mark.asyncio
async def test_result_carries_video_id() -> None:
    result = await generate_chord_sequence("Yesterday", _URL, fetcher=StubFetcher())
    assert result.video_id == "BciS5krYL80"


@pytest.mark.asyncio
async def test_min_samples_override_and_env(monkeypatch: pytest.MonkeyPatch) -> None:
    result = await generate_chord_sequence(
        "Yesterday", _URL, fetcher=StubFetcher(_evenly_spaced(3)), min_samples=3
    )
    assert result.source == "analysis"

    monkeypatch.setenv("CHORDSYNTH_MIN_SAMPLES", "20")
    result = await generate_chord_sequence(
        "Yesterday", _URL, fetcher=StubFetcher(_evenly_spaced(15))
    )
    assert result.source == "synthesized"


@pytest.mark.asyncio
async def test_user_fetcher_is_not_closed() -> None:
    fetcher = StubFetcher(_evenly_spaced(12))
    await generate_chord_sequence("Yesterday", _URL, fetcher=fetcher)
    assert fetcher.closed is False


@pytest.mark.asyncio
async def test_endpoint_spec_builds_and_closes_http_fetcher(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    built: list[StubFetcher] = []

    def fake_build(spec: sources.AnalysisServiceSpec) -> StubFetcher:
        assert spec.endpoint == "http://chords.test/analyze"
        fetcher = StubFetcher(_evenly_spaced(12))
        built.append(fetcher)
        return fetcher

    monkeypatch.setattr(sources, "_build_http_fetcher", fake_build)
    result = await generate_chord_sequence(
        "Yesterday", _URL, fetcher="http://chords.test/analyze"
    )

    assert result.source == "analysis"
    assert len(built) == 1
    assert built[0].closed is True


@pytest.mark.asyncio
async def test_hooks_report_fallback() -> None:
    kinds: list[str] = []
    fallbacks: list[tuple[str, str | None]] = []
    completed: list[GenerateResult] = []

    hooks = GenerateHooks(
        on_event=lambda event: kinds.append(event.kind),
        on_fallback=lambda reason, advisory: fallbacks.append((reason, advisory)),
        on_complete=completed.append,
    )
    result = await generate_chord_sequence(
        "Yesterday",
        _URL,
        fetcher=StubFetcher(error=FetchError("boom")),
        hooks=hooks,
    )

    assert kinds == ["fetch_start", "fetch_error", "fallback_used", "complete"]
    assert fallbacks == [("fetch_error", "boom")]
    assert completed == [result]


@pytest.mark.asyncio
async def test_hooks_report_insufficient_data() -> None:
    events: list[GenerateEvent] = []
    fetched: list[int] = []
    hooks = GenerateHooks(on_event=events.append, on_fetch_end=fetched.append)

    await generate_chord_sequence(
        "Yesterday", _URL, fetcher=StubFetcher(_evenly_spaced(4)), hooks=hooks
    )

    assert [event.kind for event in events] == [
        "fetch_start",
        "fetch_end",
        "insufficient_data",
        "fallback_used",
        "complete",
    ]
    assert fetched == [4]
    assert events[3].reason == "insufficient_data"


@pytest.mark.asyncio
async def test_failing_hook_does_not_break_generation(caplog: pytest.LogCaptureFixture) -> None:
    def explode(event: GenerateEvent) -> None:
        raise ValueError(f"hook exploded on {event.kind}")

    caplog.set_level(logging.WARNING, logger="chordsynth")
    result = await generate_chord_sequence(
        "Yesterday",
        _URL,
        fetcher=StubFetcher(_evenly_spaced(10)),
        hooks=GenerateHooks(on_event=explode),
    )

    assert result.source == "analysis"
    assert any("hook exploded" in record.getMessage() for record in caplog.records)


@pytest.mark.asyncio
async def test_insufficient_data_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="chordsynth")
    await generate_chord_sequence("Yesterday", _URL, fetcher=StubFetcher(_evenly_spaced(2)))
    assert any("insufficient" in record.getMessage() for record in caplog.records)


def test_generate_is_blocking_and_seeded() -> None:
    first = generate("Wonderwall", _URL, fetcher=StubFetcher(error=FetchError("x")), seed=42)
    second = generate("Wonderwall", _URL, fetcher=StubFetcher(error=FetchError("x")), seed=42)
    assert first.events == second.events
    assert first.source == "synthesized"


@pytest.mark.asyncio
async def test_generate_works_inside_running_loop() -> None:
    result = generate("Yesterday", _URL, fetcher=StubFetcher(_evenly_spaced(10)))
    assert result.source == "analysis"


@pytest.mark.asyncio
@pytest.mark.parametrize("min_samples", [0, -3])
async def test_empty_analysis_never_wins_with_low_threshold(min_samples: int) -> None:
    result = await generate_chord_sequence(
        "Yesterday", "", fetcher=StubFetcher(), min_samples=min_samples
    )
    assert result.source == "synthesized"
    assert result.events


@pytest.mark.asyncio
@pytest.mark.parametrize("value", ["0", "-1"])
async def test_empty_analysis_never_wins_with_low_env_threshold(
    monkeypatch: pytest.MonkeyPatch, value: str
) -> None:
    monkeypatch.setenv("CHORDSYNTH_MIN_SAMPLES", value)
    result = await generate_chord_sequence("Yesterday", "", fetcher=StubFetcher())
    assert result.source == "synthesized"
    assert result.events


@pytest.mark.asyncio
async def test_seed_matches_numpy_generator() -> None:
    seeded = await generate_chord_sequence(
        "Wonderwall", _URL, fetcher=StubFetcher(error=FetchError("x")), seed=11
    )
    explicit = await generate_chord_sequence(
        "Wonderwall",
        _URL,
        fetcher=StubFetcher(error=FetchError("x")),
        rng=np.random.default_rng(11),
    )
    assert seeded.events == explicit.events
