"""Command line entry point: ``git-versioning process|version|related``."""

import contextlib
import os
from pathlib import Path
from typing import Annotated, Any, Iterable

import click
import typer

from git_versioning import logs, options, parsers, paths
from git_versioning.errors import GitVersioningError
from git_versioning.options import Options
from git_versioning.sessions import Session

LOG = logs.logger(__file__)


def _properties_callback(values: Iterable[Any] | None) -> list[str]:
    values = list(values or [])
    for value in values:
        try:
            parsers.to_key_value(value)
        except ValueError as e:
            raise click.BadParameter(str(e)) from e
    return values


_PATH = Annotated[
    Path,
    typer.Argument(help="Project directory or descriptor file", exists=True),
]
_PROPERTIES = Annotated[
    list[str],
    typer.Option(
        "-D",
        "--define",
        help="Build parameter as key=value",
        callback=_properties_callback,
    ),
]
_DISABLE = Annotated[bool, typer.Option("--disable", help="Disable versioning")]
_PREFER_TAGS = Annotated[bool, typer.Option("--prefer-tags", help="Prefer tags over the branch")]
_UPDATE_POM = Annotated[bool, typer.Option("--update-pom", help="Copy the derived descriptor over the original")]
_TAG = Annotated[str, typer.Option("--tag", help="Override the head tag")]
_BRANCH = Annotated[str, typer.Option("--branch", help="Override the head branch")]

app = typer.Typer(no_args_is_help=True)


@app.command()
def process(
    path: _PATH = Path("."),
    properties: _PROPERTIES = None,
    disable: _DISABLE = False,
    prefer_tags: _PREFER_TAGS = False,
    update_pom: _UPDATE_POM = False,
    tag: _TAG = None,
    branch: _BRANCH = None,
):
    """Write the derived descriptor of the project at PATH and of its modules."""
    session = _session(path, properties, disable, prefer_tags, update_pom, tag, branch)
    with _errors():
        for model in session.process_all(path):
            if model.derived_file:
                typer.echo(str(model.derived_file))


@app.command()
def version(
    path: _PATH = Path("."),
    properties: _PROPERTIES = None,
    prefer_tags: _PREFER_TAGS = False,
    tag: _TAG = None,
    branch: _BRANCH = None,
):
    """Print the resolved version of the project at PATH."""
    session = _session(path, properties, False, prefer_tags, False, tag, branch)
    with _errors():
        if (value := session.version(path)) is not None:
            typer.echo(value)


@app.command()
def related(
    path: _PATH = Path("."),
    properties: _PROPERTIES = None,
):
    """Print the coordinates sharing the versioning context of PATH."""
    session = _session(path, properties, False, False, False, None, None)
    with _errors():
        for coordinate in sorted(session.related_projects(path), key=str):
            typer.echo(coordinate.project_id)


def _session(
    path: Path,
    properties: list[str] | None,
    disable: bool,
    prefer_tags: bool,
    update_pom: bool,
    tag: str | None,
    branch: str | None,
) -> Session:
    user_properties = dict(parsers.to_key_value(p) for p in properties or [])
    for name, flag in (
        (options.DISABLE, disable),
        (options.PREFER_TAGS, prefer_tags),
        (options.UPDATE_POM, update_pom),
    ):
        if flag:
            user_properties[name] = "true"
    if tag is not None:
        user_properties[options.GIT_TAG] = tag
    if branch is not None:
        user_properties[options.GIT_BRANCH] = branch
    execution_root = paths.path(path)
    if execution_root.is_file():
        execution_root = execution_root.parent
    return Session(
        execution_root,
        Options(user_properties=user_properties, environ=dict(os.environ)),
    )


@contextlib.contextmanager
def _errors():
    """Turn package errors into a logged message and exit code 1."""
    try:
        yield
    except GitVersioningError as e:
        LOG.error(f"{type(e).__name__}: {e}")
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
