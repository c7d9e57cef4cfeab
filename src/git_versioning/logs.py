"""
Console logging helpers for build output.

Environment variables
- GIT_VERSIONING_LOG_AUTO_CONFIG: if false, leave root logger configuration to the host
- GIT_VERSIONING_LOG_LEVEL: level name or prefix applied on auto configuration (default INFO)
"""

import functools
import logging
import math
import os
import sys
from collections.abc import Callable, Iterable

from git_versioning import parsers, paths

_LOG_AUTO_CONFIG = parsers.to_bool(
    os.getenv("GIT_VERSIONING_LOG_AUTO_CONFIG", True), True
)
_LOG_LEVEL = os.getenv("GIT_VERSIONING_LOG_LEVEL", "INFO")
_AUTO_CONFIG_MARK = object()
_HEADER_WIDTH = 72


def auto_config():
    """Install stdout/stderr handlers on the root logger once per process."""
    if not _LOG_AUTO_CONFIG:
        return
    root = logging.getLogger()
    if any(
        _AUTO_CONFIG_MARK is getattr(handler, "auto_config_mark", None)
        for handler in root.handlers
    ):
        return
    level, _ = get_level(_LOG_LEVEL, logging.INFO)
    logging.basicConfig(level=level, handlers=list(_auto_config_handlers()))


def logger(*names: str | None) -> logging.Logger:
    """
    Return a logger for the resolved name or the package logger.

    Selection rules
    1) Use the first non empty name that is not "__main__"
    2) If a provided name looks like a path, use its basename without extension
    3) If nothing resolves, return the ``git_versioning`` logger
    """
    auto_config()
    name = _logger_name(*names)
    return logging.getLogger(f"git_versioning.{name}" if name else "git_versioning")


def header(text: str, pad: str = "-") -> str:
    """Center ``text`` in a banner padded to a fixed width, at least 3 pads per side."""
    text = f" {text} "
    padding = max(6, _HEADER_WIDTH - len(text))
    return pad * math.floor(padding / 2) + text + pad * math.ceil(padding / 2)


def get_levels() -> Iterable[tuple[int, str]]:
    """Return all known logging levels as (value, name) pairs."""
    return [(val, name) for name, val in logging.getLevelNamesMapping().items()]


def get_level(level, default=None) -> tuple[int, str]:
    """
    Resolve a level specifier to a (value, name) pair.

    Accepts ints, exact names, case insensitive names and unambiguous
    case insensitive prefixes. Falls back to ``default`` when given,
    otherwise raises ValueError.
    """
    if isinstance(level, int):
        if name := logging.getLevelName(level):
            if not name.startswith("Level "):
                return level, name
    else:
        level = str(level).strip()
        matched: dict[str, int] = {}
        for val, name in get_levels():
            if name.casefold() == level.casefold():
                return val, name
            if level and name.casefold().startswith(level.casefold()):
                matched.setdefault(name, val)
        if len(matched) == 1:
            name, val = matched.popitem()
            return val, name
        elif len(matched) > 1 and default is None:
            raise ValueError(f"Ambiguous level: {level}")
    if default is not None:
        return get_level(default)
    raise ValueError(f"Invalid level: {level}")


def _logger_name(*names: str | None) -> str | None:
    for name in names:
        if not name or name == "__main__":
            continue
        if name.endswith(".py"):
            if file_path := paths.path(name, resolve=False):
                name = os.path.splitext(file_path.name)[0]
        return name.removeprefix("git_versioning.")
    return None


def _auto_config_handlers() -> Iterable[logging.Handler]:
    for error in [False, True]:
        stream = sys.stdout if not error else sys.stderr
        handler = Handler(stream=stream)
        handler.auto_config_mark = _AUTO_CONFIG_MARK
        handler.setFormatter(Formatter())
        if error:
            handler.setLevel(logging.WARNING)
        else:
            handler.addFilter(lambda record: record.levelno < logging.WARNING)
        yield handler


class Handler(logging.StreamHandler):
    """StreamHandler that colors records by level when the stream is a terminal."""

    COLORS = {
        logging.DEBUG: "\033[38;2;180;180;180m",
        logging.INFO: None,
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[41m",
    }
    RESET = "\033[0m"

    def format(self, record):
        msg = super().format(record)
        if not self._supports_color():
            return msg
        color = self._color(record.levelno)
        return f"{color}{msg}{self.RESET}" if color else msg

    def _supports_color(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        if not isatty or not isatty():
            return False
        term = os.getenv("TERM", "")
        return term.casefold() not in ("dumb", "", "unknown") or os.name == "nt"

    @staticmethod
    @functools.cache
    def _color(levelno: int) -> str:
        """Exact color for a level, else the color of the closest lower level."""
        _, color = max(
            ((k, v) for k, v in Handler.COLORS.items() if k <= levelno),
            key=lambda x: x[0],
            default=(0, None),
        )
        return color or ""


class Formatter(logging.Formatter):
    """
    Space efficient formatter: level, logger name and message.

    The package prefix is dropped from logger names and a " | " separates the
    header fields from the message.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._formatters: list[Callable[[logging.LogRecord], str]] = [
            lambda x: x.levelname,
            lambda x: f"[{x.name.removeprefix('git_versioning.')}]"
            if x.name.startswith("git_versioning.")
            else "",
            lambda x: x.message,
        ]

    def formatMessage(self, record):
        out = None
        last = len(self._formatters) - 1
        for i, formatter in enumerate(self._formatters):
            if value := formatter(record):
                if out:
                    out += (" | " if i == last else " ") + value
                else:
                    out = value
        return out or ""
