"""Logging setup for chordsynth.

Everything logs under the ``chordsynth`` logger. Environment toggles:

- ``CHORDSYNTH_DEBUG``: console output at DEBUG instead of INFO.
- ``CHORDSYNTH_LOG_FILE``: set to 0/false/no/off to skip the log file.
- ``CHORDSYNTH_LOG_DIR``: where ``chordsynth.log`` is written.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

_LOGGER = logging.getLogger("chordsynth.logging")
_ROOT_NAME = "chordsynth"
_OFF_VALUES = frozenset({"0", "false", "no", "off"})
_FILE_FORMATTER = logging.Formatter(
    "%(asctime)s %(levelname)-7s %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
_CONSOLE_FORMATTER = logging.Formatter("[%(name)s] %(message)s")
_configured = False


def debug_enabled() -> bool:
    return bool(os.environ.get("CHORDSYNTH_DEBUG"))


def _log_file_enabled() -> bool:
    return os.environ.get("CHORDSYNTH_LOG_FILE", "1").strip().lower() not in _OFF_VALUES


def get_log_dir() -> Path:
    configured = os.environ.get("CHORDSYNTH_LOG_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / _ROOT_NAME / "logs"


def get_log_path() -> Path:
    return get_log_dir() / f"{_ROOT_NAME}.log"


def _open_log_file() -> logging.FileHandler | None:
    path = get_log_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("Cannot open log file %s: %s", path, exc)
        return None
    handler.setFormatter(_FILE_FORMATTER)
    return handler


def _build_handlers(*, console: bool) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if console:
        stream = logging.StreamHandler(stream=sys.__stderr__)
        stream.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)
        stream.setFormatter(_CONSOLE_FORMATTER)
        handlers.append(stream)
    if _log_file_enabled():
        file_handler = _open_log_file()
        if file_handler is not None:
            file_handler.setLevel(logging.DEBUG)
            handlers.append(file_handler)
    return handlers


def configure_logging(*, force: bool = False) -> None:
    """Attach chordsynth's handlers once; ``force`` replaces existing ones.

    The console handler is only added when the host application has not set
    up root logging itself.
    """
    global _configured
    if _configured and not force:
        return

    logger = logging.getLogger(_ROOT_NAME)
    logger.setLevel(logging.DEBUG)
    if force:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    console = force or not logging.getLogger().handlers
    for handler in _build_handlers(console=console):
        logger.addHandler(handler)
    logger.propagate = True
    _configured = True


def log_exception(context: str, exc: BaseException) -> Path | None:
    """Append ``exc`` with its traceback to the log file; returns the path written."""
    handler = _open_log_file()
    if handler is None:
        return None
    record = _LOGGER.makeRecord(
        _LOGGER.name,
        logging.ERROR,
        __file__,
        0,
        "%s failed: %s: %s",
        (context, type(exc).__name__, exc),
        (type(exc), exc, exc.__traceback__),
    )
    try:
        handler.emit(record)
    finally:
        handler.close()
    return Path(handler.baseFilename)
