from __future__ import annotations

import logging
from collections.abc import Mapping

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ..config import DEFAULT_ANALYSIS_TIMEOUT, RawSample
from ..errors import FetchError

_LOGGER = logging.getLogger("chordsynth.providers.http")
_SAMPLES_ADAPTER = TypeAdapter(list[RawSample])


class _AnalysisRequest(BaseModel):
    url: str


class _AnalysisResponse(BaseModel):
    chords: list[RawSample]


def _content_snippet(content: str, limit: int = 200) -> str:
    cleaned = content.strip()
    if len(cleaned) <= limit:
        return cleaned
    return f"{cleaned[:limit]}..."


def parse_samples(payload: str | bytes) -> list[RawSample]:
    """Parse either a bare sample list or ``{"chords": [...]}``; sort by time."""
    try:
        samples = _SAMPLES_ADAPTER.validate_json(payload)
    except ValidationError:
        try:
            samples = _AnalysisResponse.model_validate_json(payload).chords
        except ValidationError as exc:
            text = payload.decode("utf-8", "replace") if isinstance(payload, bytes) else payload
            snippet = _content_snippet(text) or "<empty>"
            _LOGGER.warning("Chord analysis returned invalid payload: %s", snippet)
            raise FetchError(f"Chord analysis returned invalid payload: {snippet}") from exc
    return sorted(samples, key=lambda sample: sample.time)


class HttpChordFetcher:
    """Chord-analysis client over HTTP implementing the async fetcher protocol."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_ANALYSIS_TIMEOUT,
        headers: Mapping[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers=dict(headers or {}),
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, url: str) -> list[RawSample]:
        request = _AnalysisRequest(url=url).model_dump()
        _LOGGER.debug("Requesting chord analysis for %s from %s", url, self._endpoint)
        try:
            response = await self._client.post(self._endpoint, json=request)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            _LOGGER.warning("Chord analysis returned HTTP %s", status)
            raise FetchError(f"Chord analysis failed with HTTP {status}") from exc
        except httpx.HTTPError as exc:
            _LOGGER.warning("Chord analysis request failed: %s", exc, exc_info=True)
            raise FetchError(f"Chord analysis request failed: {exc}") from exc

        samples = parse_samples(response.content)
        _LOGGER.debug("Chord analysis returned %d samples", len(samples))
        return samples
