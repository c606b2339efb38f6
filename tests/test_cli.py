from __future__ import annotations

import pytest

import chordsynth.cli as cli
from chordsynth.config import ChordEvent, GenerateResult


def test_structures_command_lists_catalog(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["structures"]) == 0
    out = capsys.readouterr().out
    assert "hotel_california" in out
    assert "wonderwall" in out
    assert "default" in out


def test_generate_offline_prints_advisory(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["generate", "Wonderwall", "--offline", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "offline mode" in out
    assert "Using fallback chord progression" in out


def test_generate_offline_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["generate", "Yesterday", "--offline", "--json", "--seed", "2"]) == 0
    out = capsys.readouterr().out
    assert '"startTime"' in out
    assert '"chord"' in out


def test_cli_reports_failures(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    def boom(*args: object, **kwargs: object) -> None:
        raise RuntimeError("engine offline")

    logged: list[str] = []
    monkeypatch.setattr(cli, "generate", boom)
    monkeypatch.setattr(cli, "log_exception", lambda context, exc: logged.append(context))

    assert cli.main(["generate", "Yesterday"]) == 1
    assert logged == ["chordsynth CLI"]
    assert "engine offline" in capsys.readouterr().err


def test_generate_table_reports_total_length(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    result = GenerateResult(
        events=(
            ChordEvent(chord="C", start_time=2.0, duration=4.0),
            ChordEvent(chord="G", start_time=6.0, duration=8.0),
        ),
        source="analysis",
    )
    monkeypatch.setattr(cli, "generate", lambda *args, **kwargs: result)

    assert cli.main(["generate", "Yesterday"]) == 0
    assert "2 chords (analysis, 14s)" in capsys.readouterr().out
