from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .catalog import STRUCTURES
from .config import GenerateResult, RawSample
from .errors import FetchError
from .logging_utils import configure_logging, debug_enabled, log_exception
from .main import generate

_LOGGER = logging.getLogger("chordsynth.cli")
_CONSOLE = Console()
_ERR_CONSOLE = Console(stderr=True)


class _OfflineFetcher:
    async def fetch(self, url: str) -> Sequence[RawSample]:
        raise FetchError(f"offline mode; skipped analysis of {url or '<no url>'}")


def render_error(context: str, exc: BaseException) -> None:
    _ERR_CONSOLE.print(f"[bold red]{context} failed:[/] {type(exc).__name__}: {escape(str(exc))}")


def _print_result(result: GenerateResult, *, as_json: bool) -> None:
    if as_json:
        _CONSOLE.print_json(json.dumps(result.to_playback()))
        return
    title = f"{len(result.events)} chords ({result.source}"
    if result.structure:
        title += f", {result.structure} structure"
    title += f", {result.total_duration:g}s)"
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Chord")
    table.add_column("Start (s)", justify="right")
    table.add_column("Duration (s)", justify="right")
    for index, event in enumerate(result.events, start=1):
        table.add_row(
            str(index),
            event.chord,
            f"{event.start_time:g}",
            f"{event.duration:g}",
        )
    _CONSOLE.print(table)
    if result.advisory:
        _CONSOLE.print(f"[yellow]Analysis error:[/] {escape(result.advisory)}")
        _CONSOLE.print("Using fallback chord progression")


def _print_structures() -> None:
    table = Table(title="Song structures")
    table.add_column("Name", no_wrap=True)
    table.add_column("Sections (I/V/C/B/O)")
    table.add_column("Silence")
    for name, structure in STRUCTURES.items():
        lengths = structure.section_lengths()
        silence = ", ".join(
            f"[{period.start:g}, {period.end:g})" for period in structure.silence_periods
        )
        sections = "/".join(str(value) for value in lengths.values())
        table.add_row(name, sections, silence or "-")
    _CONSOLE.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chordsynth")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Produce a chord sequence for a song.")
    gen.add_argument("title", type=str)
    gen.add_argument("--url", type=str, default="")
    gen.add_argument("--seed", type=int, default=None)
    gen.add_argument("--offline", action="store_true", help="Skip the analysis service.")
    gen.add_argument("--json", action="store_true", dest="as_json")

    sub.add_parser("structures", help="List the built-in song structures.")
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        if args.command == "generate":
            fetcher = _OfflineFetcher() if args.offline else None
            with _ERR_CONSOLE.status("Analyzing chord progression..."):
                result = generate(args.title, args.url, fetcher=fetcher, seed=args.seed)
            _print_result(result, as_json=args.as_json)
            return 0

        if args.command == "structures":
            _print_structures()
            return 0

        parser.print_help()
        return 1
    except Exception as exc:
        _LOGGER.warning("chordsynth CLI failed: %s", exc, exc_info=debug_enabled())
        log_exception("chordsynth CLI", exc)
        render_error("chordsynth CLI", exc)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
