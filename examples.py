"""Quick demo of chordsynth: ask for a song's chords, fall back to a simulated progression."""

import asyncio

import chordsynth as cs


async def main() -> None:
    # No analysis service running locally, so this falls back and reports why.
    result = await cs.generate_chord_sequence(
        "Hotel California (Remastered)",
        "https://www.youtube.com/watch?v=BciS5krYL80",
        seed=7,
    )
    if result.advisory:
        print(f"Analysis failed ({result.advisory}); using the {result.structure} template")
    for event in result.events[:8]:
        print(f"{event.start_time:6.1f}s  {event.chord:<4} for {event.duration:g}s")


asyncio.run(main())
