"""In-memory project model read from a ``pom.xml`` descriptor."""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from git_versioning import paths
from git_versioning.coordinates import (
    DEFAULT_PLUGIN_GROUP_ID,
    Coordinate,
    dependency_key,
    plugin_key,
)
from git_versioning.errors import DocumentError

DEFAULT_PARENT_RELATIVE_PATH = "../pom.xml"


@dataclass
class Parent:
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    relative_path: str = DEFAULT_PARENT_RELATIVE_PATH

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, self.version)


@dataclass
class Dependency:
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    type: str | None = None
    classifier: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id, self.artifact_id, self.version)

    @property
    def key(self) -> str:
        return dependency_key(self.group_id, self.artifact_id, self.type, self.classifier)


@dataclass
class Plugin:
    """A build plugin or a reporting plugin."""

    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.group_id or DEFAULT_PLUGIN_GROUP_ID, self.artifact_id, self.version)

    @property
    def key(self) -> str:
        return plugin_key(self.group_id, self.artifact_id)


@dataclass
class Build:
    plugins: list[Plugin] = field(default_factory=list)
    plugin_management: list[Plugin] | None = None


@dataclass
class ModelBase:
    """Sections shared by a project and its profiles."""

    modules: list[str] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    dependencies: list[Dependency] = field(default_factory=list)
    dependency_management: list[Dependency] | None = None
    build: Build | None = None
    reporting: list[Plugin] | None = None


@dataclass
class Profile(ModelBase):
    id: str | None = None


@dataclass
class Model(ModelBase):
    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    parent: Parent | None = None
    profiles: list[Profile] = field(default_factory=list)
    pom_file: Path | None = None
    derived_file: Path | None = None

    @property
    def coordinate(self) -> Coordinate:
        """Own coordinate; group and version are inherited from the parent when absent."""
        group_id, version = self.group_id, self.version
        if self.parent is not None:
            group_id = group_id or self.parent.group_id
            version = version or self.parent.version
        return Coordinate(group_id, self.artifact_id, version)

    @property
    def project_dir(self) -> Path:
        return self.pom_file.parent

    def sections(self) -> Iterable[ModelBase]:
        """The project itself followed by each profile."""
        yield self
        yield from self.profiles

    def module_files(self) -> set[Path]:
        """Descriptor files of the declared modules, including profile modules."""
        return {
            paths.pom_file(self.project_dir, module)
            for section in self.sections()
            for module in section.modules
        }

    def parent_file(self) -> Path | None:
        """Descriptor the parent reference points at, when that file exists."""
        if self.parent is None or not self.parent.relative_path:
            return None
        file = paths.pom_file(self.project_dir, self.parent.relative_path)
        return file if file.exists() else None


def read(pom_file: Path) -> Model:
    """Parse a descriptor file into a ``Model``."""
    pom_file = Path(pom_file)
    try:
        root = ET.parse(pom_file).getroot()
    except ET.ParseError as e:
        raise DocumentError(f"invalid descriptor - path:{pom_file} error:{e}") from e
    if _name(root) != "project":
        raise DocumentError(f"descriptor root is not a project - path:{pom_file}")
    model = Model(
        group_id=_child_text(root, "groupId"),
        artifact_id=_child_text(root, "artifactId"),
        version=_child_text(root, "version"),
        pom_file=pom_file,
    )
    if (parent := _child(root, "parent")) is not None:
        model.parent = Parent(
            group_id=_child_text(parent, "groupId"),
            artifact_id=_child_text(parent, "artifactId"),
            version=_child_text(parent, "version"),
            relative_path=_child_text(parent, "relativePath", DEFAULT_PARENT_RELATIVE_PATH),
        )
    _read_section(root, model)
    if (profiles := _child(root, "profiles")) is not None:
        for element in _children(profiles, "profile"):
            profile = Profile(id=_child_text(element, "id"))
            _read_section(element, profile)
            model.profiles.append(profile)
    return model


def _read_section(element: ET.Element, section: ModelBase):
    if (modules := _child(element, "modules")) is not None:
        section.modules = [_text(m) for m in _children(modules, "module") if _text(m)]
    if (properties := _child(element, "properties")) is not None:
        section.properties = {_name(p): _text(p) or "" for p in _children(properties)}
    section.dependencies = _dependencies(_child(element, "dependencies"))
    if (management := _child(element, "dependencyManagement")) is not None:
        section.dependency_management = _dependencies(_child(management, "dependencies"))
    if (build := _child(element, "build")) is not None:
        section.build = Build(plugins=_plugins(_child(build, "plugins")))
        if (management := _child(build, "pluginManagement")) is not None:
            section.build.plugin_management = _plugins(_child(management, "plugins"))
    if (reporting := _child(element, "reporting")) is not None:
        section.reporting = _plugins(_child(reporting, "plugins"))


def _dependencies(element: ET.Element | None) -> list[Dependency]:
    if element is None:
        return []
    return [
        Dependency(
            group_id=_child_text(d, "groupId"),
            artifact_id=_child_text(d, "artifactId"),
            version=_child_text(d, "version"),
            type=_child_text(d, "type"),
            classifier=_child_text(d, "classifier"),
        )
        for d in _children(element, "dependency")
    ]


def _plugins(element: ET.Element | None) -> list[Plugin]:
    if element is None:
        return []
    return [
        Plugin(
            group_id=_child_text(p, "groupId"),
            artifact_id=_child_text(p, "artifactId"),
            version=_child_text(p, "version"),
        )
        for p in _children(element, "plugin")
    ]


def _name(element: ET.Element) -> str:
    tag = element.tag
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


def _children(element: ET.Element, name: str | None = None) -> list[ET.Element]:
    return [c for c in element if isinstance(c.tag, str) and (name is None or _name(c) == name)]


def _child(element: ET.Element, name: str) -> ET.Element | None:
    return next(iter(_children(element, name)), None)


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text.strip() if element.text else ""


def _child_text(element: ET.Element, name: str, default: str | None = None) -> str | None:
    text = _text(_child(element, name))
    return default if text is None else text
