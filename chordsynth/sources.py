from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Protocol, TypeGuard

from pydantic import BaseModel, ConfigDict, Field

from .config import RawSample, analysis_timeout, analysis_url
from .errors import ChordSynthError

_LOGGER = logging.getLogger("chordsynth.sources")

_VIDEO_ID_PATTERN = re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/)([^&\n?#]+)")


class ChordFetcher(Protocol):
    async def fetch(self, url: str) -> Sequence[RawSample]: ...


class AnalysisServiceSpec(BaseModel):
    endpoint: str = Field(default_factory=analysis_url)
    timeout: float = Field(default_factory=analysis_timeout, gt=0.0)
    headers: Mapping[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")


FetcherSpec = AnalysisServiceSpec | ChordFetcher | str | None


def extract_video_id(url: str) -> str:
    match = _VIDEO_ID_PATTERN.search(url)
    return match.group(1) if match else ""


def _is_fetcher(obj: object) -> TypeGuard[ChordFetcher]:
    return callable(getattr(obj, "fetch", None))


def _build_http_fetcher(spec: AnalysisServiceSpec) -> ChordFetcher:
    from .providers.http import HttpChordFetcher

    return HttpChordFetcher(endpoint=spec.endpoint, timeout=spec.timeout, headers=spec.headers)


def should_auto_close(spec: FetcherSpec) -> bool:
    return spec is None or isinstance(spec, (str, AnalysisServiceSpec))


def resolve_fetcher(spec: FetcherSpec) -> ChordFetcher:
    if spec is None:
        return _build_http_fetcher(AnalysisServiceSpec())
    if isinstance(spec, AnalysisServiceSpec):
        return _build_http_fetcher(spec)
    if isinstance(spec, str):
        return _build_http_fetcher(AnalysisServiceSpec(endpoint=spec))
    if _is_fetcher(spec):
        return spec
    raise ChordSynthError(f"Unknown fetcher: {spec!r}")


async def maybe_close_fetcher(fetcher: ChordFetcher | None) -> None:
    if fetcher is None:
        return
    aclose = getattr(fetcher, "aclose", None)
    if callable(aclose):
        try:
            result = aclose()
            if inspect.isawaitable(result):
                await result
            return
        except Exception as exc:
            _LOGGER.warning("Fetcher async close failed: %s", exc, exc_info=True)
            return
    close = getattr(fetcher, "close", None)
    if callable(close):
        try:
            close()
        except Exception as exc:
            _LOGGER.warning("Fetcher close failed: %s", exc, exc_info=True)
