from __future__ import annotations

from .http import HttpChordFetcher, parse_samples

__all__ = ["HttpChordFetcher", "parse_samples"]
