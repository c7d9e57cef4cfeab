"""Discovery of the projects that share the current versioning context."""

from pathlib import Path
from typing import Callable, Iterable

from git_versioning import logs, models, paths
from git_versioning.coordinates import Coordinate
from git_versioning.models import Model

LOG = logs.logger(__file__)

ModelReader = Callable[[Path], Model]


def discover(
    root_model: Model,
    execution_root: Path,
    repository_root: Path,
    read_model: ModelReader = models.read,
) -> frozenset[Coordinate]:
    """
    Return the closed set of coordinates reachable from ``root_model``.

    Projects are expanded depth first, each coordinate once. Edges come from
    three strategies: the explicit parent reference, a descriptor in the parent
    directory that lists the project as a module, and the project's own
    modules (profile modules included). Only descriptors inside both the
    execution root and the repository root are ever read.
    """
    graph = _Graph(execution_root, repository_root, read_model)
    related: set[Coordinate] = set()
    work: list[Model] = [root_model]
    while work:
        model = work.pop()
        coordinate = model.coordinate
        if coordinate in related:
            continue
        related.add(coordinate)
        LOG.debug(f"related project - coordinate:{coordinate} file:{model.pom_file}")
        edges = [
            *graph.parent_edges(model),
            *graph.directory_edges(model),
            *graph.module_edges(model),
        ]
        work.extend(reversed(edges))
    return frozenset(related)


def is_related_file(file: Path | None, execution_root: Path, repository_root: Path) -> bool:
    """
    True for project descriptors of the current build and repository.

    Descriptors pulled from artifact repositories end in ``.pom``; only ``.xml``
    files inside both roots count as project descriptors.
    """
    return (
        file is not None
        and file.is_file()
        and file.name.endswith(".xml")
        and paths.is_within(file, execution_root)
        and paths.is_within(file, repository_root)
    )


class _Graph:
    def __init__(self, execution_root: Path, repository_root: Path, read_model: ModelReader):
        self.execution_root = execution_root
        self.repository_root = repository_root
        self._read_model = read_model
        self._models: dict[Path, Model] = {}

    def parent_edges(self, model: Model) -> Iterable[Model]:
        """Parent descriptor at the relative path, if it declares the referenced coordinate."""
        if model.parent is None:
            return
        parent_file = model.parent_file()
        if not self._is_related(parent_file):
            return
        parent_model = self._read(parent_file)
        if parent_model.coordinate.matches(model.parent.coordinate):
            yield parent_model
        else:
            LOG.debug(
                f"skip parent file - reference:{model.parent.coordinate} "
                f"declared:{parent_model.coordinate} file:{parent_file}"
            )

    def directory_edges(self, model: Model) -> Iterable[Model]:
        """Descriptor in the parent directory that lists this project as a module."""
        directory_file = paths.pom_file(model.project_dir.parent)
        if not self._is_related(directory_file):
            return
        directory_model = self._read(directory_file)
        own_file = paths.canonical(model.pom_file)
        if any(paths.canonical(f) == own_file for f in directory_model.module_files()):
            yield directory_model

    def module_edges(self, model: Model) -> Iterable[Model]:
        for module_file in sorted(model.module_files()):
            if self._is_related(module_file):
                yield self._read(module_file)
            else:
                LOG.debug(f"skip module file - file:{module_file}")

    def _is_related(self, file: Path | None) -> bool:
        return is_related_file(file, self.execution_root, self.repository_root)

    def _read(self, file: Path) -> Model:
        key = paths.canonical(file)
        if (model := self._models.get(key)) is None:
            model = self._models[key] = self._read_model(key)
        return model
