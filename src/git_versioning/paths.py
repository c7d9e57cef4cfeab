"""Path helpers for resolving descriptor files and checking tree containment."""

import os
import pathlib
from pathlib import Path

POM_FILE_NAME = "pom.xml"


def path(
    *inputs,
    expanduser: bool = True,
    resolve: bool = True,
    exists: bool = False,
) -> Path | None:
    """Best effort conversion of input to a ``Path`` with optional checks.
    Later absolute inputs replace earlier ones, as with ``os.path.join``.
    When ``exists`` is true, returns None for non-existent paths.
    """
    result: pathlib.Path | None = None
    for input in inputs:
        if input is None:
            continue
        if not isinstance(input, Path):
            input = pathlib.Path(os.fspath(input))
        if expanduser:
            input = input.expanduser()
        result = input if result is None else result / input
    if result is None:
        return None
    try:
        if resolve:
            result = result.resolve()
    except (OSError, RuntimeError):
        return None
    if exists and not result.exists():
        return None
    return result


def pom_file(directory: Path, relative_path: str | None = None) -> Path:
    """Return the descriptor file for a module or parent relative path.

    Directories get ``pom.xml`` appended.
    """
    file = directory / relative_path if relative_path else directory
    if file.is_dir():
        file = file / POM_FILE_NAME
    return file


def is_within(file: Path, root: Path) -> bool:
    """Return True if ``file`` resolves strictly inside ``root``."""
    try:
        file = file.resolve()
        root = root.resolve()
    except (OSError, RuntimeError):
        return False
    return file != root and file.is_relative_to(root)


def find_up(start: Path, name: str) -> Path | None:
    """Walk from ``start`` towards the filesystem root looking for ``name``."""
    directory = path(start)
    while directory is not None:
        candidate = directory / name
        if candidate.exists():
            return candidate
        if directory.parent == directory:
            break
        directory = directory.parent
    return None


def canonical(file: Path | str) -> Path:
    """Canonical key for per-file caches."""
    return pathlib.Path(os.path.realpath(os.fspath(file)))
