from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Coroutine, Literal, TypeVar

import numpy as np
from pydantic import BaseModel, ConfigDict

from .adapter import adapt
from .catalog import select_structure
from .config import (
    ChordEvent,
    GenerateResult,
    RandomSource,
    RawSample,
    duration_hint,
    min_samples_threshold,
)
from .errors import InsufficientDataError
from .logging_utils import debug_enabled
from .progression import assemble
from .sources import (
    ChordFetcher,
    FetcherSpec,
    extract_video_id,
    maybe_close_fetcher,
    resolve_fetcher,
    should_auto_close,
)
from .timing import synthesize

FallbackReason = Literal["fetch_error", "insufficient_data"]

_LOGGER = logging.getLogger("chordsynth.main")
_EXECUTOR = ThreadPoolExecutor(max_workers=1)
_DEFAULT_ADVISORY = "Analysis failed"


class GenerateEvent(BaseModel):
    kind: Literal[
        "fetch_start",
        "fetch_end",
        "fetch_error",
        "insufficient_data",
        "fallback_used",
        "complete",
    ]
    url: str | None = None
    sample_count: int | None = None
    reason: FallbackReason | None = None
    error: Exception | None = None
    result: GenerateResult | None = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )


class GenerateHooks(BaseModel):
    on_event: Callable[[GenerateEvent], None] | None = None
    on_fetch_start: Callable[[str], None] | None = None
    on_fetch_end: Callable[[int], None] | None = None
    on_fallback: Callable[[FallbackReason, str | None], None] | None = None
    on_complete: Callable[[GenerateResult], None] | None = None

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )


def _emit_event(hooks: GenerateHooks | None, event: GenerateEvent) -> None:
    if hooks is None:
        return
    try:
        if hooks.on_event is not None:
            hooks.on_event(event)
        match event.kind:
            case "fetch_start":
                if hooks.on_fetch_start is not None and event.url is not None:
                    hooks.on_fetch_start(event.url)
            case "fetch_end":
                if hooks.on_fetch_end is not None and event.sample_count is not None:
                    hooks.on_fetch_end(event.sample_count)
            case "fallback_used":
                if hooks.on_fallback is not None and event.reason is not None:
                    advisory = str(event.error) if event.error is not None else None
                    hooks.on_fallback(event.reason, advisory or None)
            case "complete":
                if hooks.on_complete is not None and event.result is not None:
                    hooks.on_complete(event.result)
            case _:
                pass
    except Exception as exc:
        _LOGGER.warning("Generate hook failed: %s", exc, exc_info=True)


def _advisory_for(exc: Exception) -> str:
    message = str(exc).strip()
    return message or _DEFAULT_ADVISORY


def _resolve_rng(rng: RandomSource | None, seed: int | None) -> RandomSource | None:
    if rng is not None:
        return rng
    if seed is not None:
        return np.random.default_rng(seed)
    return None


def synthesize_for_title(
    title: str,
    *,
    rng: RandomSource | None = None,
    hint: float | None = None,
) -> tuple[str, list[ChordEvent]]:
    """Build a simulated progression for ``title``; returns (structure name, events).

    ``hint`` is the intended song length in seconds. It is logged only; the
    actual length comes from the accumulated chord durations.
    """
    structure = select_structure(title)
    _LOGGER.info("Generating chord progression for %r (target ~%ss)", title, hint)
    events = synthesize(assemble(structure), structure, rng=rng)
    if events:
        _LOGGER.debug("First chords: %s", events[:10])
        _LOGGER.debug("Last chords: %s", events[-10:])
    return structure.name, events


def _require_samples(samples: Sequence[RawSample], threshold: int) -> None:
    if not samples or len(samples) < threshold:
        raise InsufficientDataError(len(samples), threshold)


async def generate_chord_sequence(
    title: str,
    url: str,
    *,
    fetcher: FetcherSpec = None,
    rng: RandomSource | None = None,
    seed: int | None = None,
    min_samples: int | None = None,
    duration_hint_seconds: float | None = None,
    hooks: GenerateHooks | None = None,
) -> GenerateResult:
    """Produce the chord sequence for a song, preferring real analysis.

    Analysis results are used when at least ``min_samples`` samples come back.
    Otherwise, or when the fetch raises, a progression is simulated from the
    catalog structure matching ``title``. Fetch failures never propagate; the
    error message is returned as ``GenerateResult.advisory``.
    """
    threshold = max(1, min_samples if min_samples is not None else min_samples_threshold())
    hint = duration_hint_seconds if duration_hint_seconds is not None else duration_hint()
    video_id = extract_video_id(url)

    resolved: ChordFetcher | None = None
    samples: Sequence[RawSample] = ()
    reason: FallbackReason | None = None
    failure: Exception | None = None
    try:
        resolved = resolve_fetcher(fetcher)
        _emit_event(hooks, GenerateEvent(kind="fetch_start", url=url))
        samples = await resolved.fetch(url)
        _emit_event(hooks, GenerateEvent(kind="fetch_end", url=url, sample_count=len(samples)))
        _require_samples(samples, threshold)
    except InsufficientDataError as exc:
        _LOGGER.info("API returned insufficient chords: %d - using fallback", exc.count)
        reason = "insufficient_data"
        _emit_event(
            hooks,
            GenerateEvent(kind="insufficient_data", url=url, sample_count=exc.count),
        )
    except Exception as exc:
        _LOGGER.warning("Chord analysis failed: %s", exc, exc_info=debug_enabled())
        reason = "fetch_error"
        failure = exc
        _emit_event(hooks, GenerateEvent(kind="fetch_error", url=url, error=exc))
    finally:
        if resolved is not None and should_auto_close(fetcher):
            await maybe_close_fetcher(resolved)

    if reason is None:
        _LOGGER.info("Using API chord data: %d chords", len(samples))
        result = GenerateResult(
            events=tuple(adapt(samples)),
            source="analysis",
            sample_count=len(samples),
            video_id=video_id,
        )
    else:
        structure_name, events = synthesize_for_title(
            title, rng=_resolve_rng(rng, seed), hint=hint
        )
        result = GenerateResult(
            events=tuple(events),
            source="synthesized",
            structure=structure_name,
            advisory=_advisory_for(failure) if failure is not None else None,
            sample_count=len(samples),
            duration_hint=hint,
            video_id=video_id,
        )
        _emit_event(
            hooks,
            GenerateEvent(kind="fallback_used", url=url, reason=reason, error=failure),
        )

    _emit_event(hooks, GenerateEvent(kind="complete", url=url, result=result))
    return result


T = TypeVar("T")


def _run_async(coro: Coroutine[Any, Any, T]) -> T:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        _LOGGER.debug("No running event loop; running coroutine directly.")
        return asyncio.run(coro)

    return _EXECUTOR.submit(lambda: asyncio.run(coro)).result()


def generate(
    title: str,
    url: str,
    *,
    fetcher: FetcherSpec = None,
    rng: RandomSource | None = None,
    seed: int | None = None,
    min_samples: int | None = None,
    duration_hint_seconds: float | None = None,
    hooks: GenerateHooks | None = None,
) -> GenerateResult:
    """Blocking wrapper around :func:`generate_chord_sequence`."""
    return _run_async(
        generate_chord_sequence(
            title,
            url,
            fetcher=fetcher,
            rng=rng,
            seed=seed,
            min_samples=min_samples,
            duration_hint_seconds=duration_hint_seconds,
            hooks=hooks,
        )
    )
