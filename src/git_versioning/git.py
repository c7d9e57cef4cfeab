"""Read the head situation of a git working tree."""

from pathlib import Path
from typing import Callable

import sh

from git_versioning import logs, paths
from git_versioning.errors import GitContextUnavailable
from git_versioning.situations import RefSituation

LOG = logs.logger(__file__)


def situation(path: Path | str) -> RefSituation:
    """
    Head commit, timestamp, branch, tags and clean flag of the repository at ``path``.

    Raises ``GitContextUnavailable`` when ``path`` is not inside a repository or
    the repository has no commit yet.
    """
    directory = paths.path(path)
    if directory is not None and not directory.is_dir():
        directory = directory.parent
    if directory is None:
        raise GitContextUnavailable(f"invalid path - path:{path}")
    git = _command(directory)
    try:
        root_dir = Path(_output(git("rev-parse", "--show-toplevel")))
    except sh.ErrorReturnCode as e:
        raise GitContextUnavailable(f"not a git repository - path:{directory}") from e
    try:
        head_commit = _output(git("rev-parse", "--verify", "HEAD"))
    except sh.ErrorReturnCode as e:
        raise GitContextUnavailable(f"repository has no commit - path:{root_dir}") from e
    result = RefSituation(
        head_commit=head_commit,
        head_commit_timestamp=int(_output(git("show", "-s", "--format=%ct", "HEAD")) or 0),
        head_branch=_branch(git),
        head_tags=tuple(_lines(git("tag", "--points-at", "HEAD"))),
        clean=not _lines(git("status", "--porcelain")),
        root_dir=root_dir,
    )
    LOG.debug(
        f"git situation - root:{result.root_dir} commit:{result.head_commit} "
        f"branch:{result.head_branch} tags:{list(result.head_tags)} clean:{result.clean}"
    )
    return result


def _command(directory: Path) -> Callable[..., str]:
    """``git`` baked to run against ``directory``."""
    try:
        return sh.git.bake("--no-pager", "-C", str(directory), _tty_out=False)
    except sh.CommandNotFound as e:
        raise GitContextUnavailable("git executable not found") from e


def _branch(git: Callable[..., str]) -> str | None:
    try:
        return _output(git("symbolic-ref", "-q", "--short", "HEAD")) or None
    except sh.ErrorReturnCode:
        # detached head
        return None


def _output(value) -> str:
    return str(value).strip()


def _lines(value) -> list[str]:
    return [line.strip() for line in str(value).splitlines() if line.strip()]
