"""Apply resolved versions to a project model and mirror them onto the descriptor text."""

import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence, TypeVar

from git_versioning import configs, documents, logs, placeholders
from git_versioning.configs import PropertyRule
from git_versioning.coordinates import Coordinate, dependency_key, plugin_key
from git_versioning.documents import Document, Element
from git_versioning.errors import StructuralMismatch
from git_versioning.models import Dependency, Model, ModelBase, Plugin, Profile
from git_versioning.situations import ResolvedVersion

LOG = logs.logger(__file__)

DERIVED_FILE_NAME = ".git-versioned-pom.xml"

T = TypeVar("T")


class Synchronizer:
    """
    Rewrites version bearing fields for one session.

    Only coordinates in ``related`` have their references rewritten; every
    other parent, dependency and plugin keeps the version it declares.
    """

    def __init__(
        self,
        resolved: ResolvedVersion,
        context: Mapping[str, str],
        related: frozenset[Coordinate],
    ):
        self.resolved = resolved
        self.context = context
        self.related = related
        self.property_rules: dict[str, PropertyRule] = configs.property_rules(resolved.rule)

    def version(self, coordinate: Coordinate) -> str:
        """Rendered version for a coordinate, based on the version it declares."""
        context = placeholders.project_context(self.context, coordinate.version)
        return placeholders.render_version(self.resolved.rule.version_format, context)

    def property_value(self, original: Coordinate, name: str, value: str) -> str:
        rule = self.property_rules.get(name)
        if rule is None:
            return value
        context = placeholders.project_context(self.context, original.version)
        context["value"] = value
        return placeholders.render(rule.value_format, context)

    def apply(self, model: Model, document: Document | None = None) -> bytes:
        """Update ``model`` then its textual mirror; return the derived descriptor bytes."""
        if document is None:
            document = documents.read(model.pom_file)
        self.update_model(model)
        self.update_document(document, model)
        return document.to_bytes()

    # ---- model ---------------------------------------------------------------------------

    def update_model(self, model: Model):
        original = model.coordinate
        parent = model.parent
        if parent is not None and parent.coordinate in self.related:
            parent.version = self.version(parent.coordinate)
            LOG.debug(f"set parent version - version:{parent.version} parent:{parent.coordinate.project_id}")
        if model.version is not None:
            model.version = self.version(model.coordinate)
        LOG.info(f"project version: {model.coordinate.version}")
        for section in model.sections():
            self._update_properties(section, original)
            for entries in _dependency_lists(section):
                self._update_versions(section, entries)
            for entries in _plugin_lists(section):
                self._update_versions(section, entries)

    def _update_properties(self, section: ModelBase, original: Coordinate):
        for name, value in list(section.properties.items()):
            new_value = self.property_value(original, name, value)
            if new_value != value:
                LOG.info(f"{_section_label(section)}property {name}: {new_value}")
                section.properties[name] = new_value

    def _update_versions(self, section: ModelBase, entries: Sequence[Dependency | Plugin]):
        for entry in entries:
            coordinate = entry.coordinate
            if entry.version is None or coordinate not in self.related:
                continue
            entry.version = self.version(coordinate)
            LOG.debug(f"{_section_label(section)}{coordinate.project_id}: set version to {entry.version}")

    # ---- document ------------------------------------------------------------------------

    def update_document(self, document: Document, model: Model):
        project = document.root
        if project.local_name != "project":
            raise StructuralMismatch(f"descriptor root is not a project - root:{project.name}")
        parent = project.child("parent")
        if (parent is None) != (model.parent is None):
            raise StructuralMismatch("parent declared in only one of descriptor and model")
        if parent is not None:
            _set_text(parent.child("version"), model.parent.version)
        if model.version is not None:
            _set_text(project.child("version"), model.version)
        self._update_section(project, model)
        for element, profile in _pair(
            project.child("profiles"), model.profiles, _profile_key, lambda p: p.id, "profiles"
        ):
            self._update_section(element, profile)

    def _update_section(self, element: Element, section: ModelBase):
        if (properties := element.child("properties")) is not None:
            for name in self.property_rules:
                if name in section.properties:
                    _set_text(properties.child(name), section.properties[name])
        _update_version_elements(
            element.child("dependencies"), section.dependencies, _dependency_element_key, "dependencies"
        )
        _update_version_elements(
            _path(element, "dependencyManagement", "dependencies"),
            section.dependency_management or [],
            _dependency_element_key,
            "dependency management",
        )
        build = section.build
        _update_version_elements(
            _path(element, "build", "plugins"),
            build.plugins if build else [],
            _plugin_element_key,
            "plugins",
        )
        _update_version_elements(
            _path(element, "build", "pluginManagement", "plugins"),
            (build.plugin_management if build else None) or [],
            _plugin_element_key,
            "plugin management",
        )
        _update_version_elements(
            _path(element, "reporting", "plugins"),
            section.reporting or [],
            _plugin_element_key,
            "reporting plugins",
        )


def apply(
    model: Model,
    resolved: ResolvedVersion,
    context: Mapping[str, str],
    related: frozenset[Coordinate],
    document: Document | None = None,
) -> bytes:
    """One shot synchronization of ``model`` and its descriptor text."""
    return Synchronizer(resolved, context, related).apply(model, document)


def derived_file(model: Model) -> Path:
    return model.project_dir / DERIVED_FILE_NAME


def write(model: Model, data: bytes) -> Path:
    """Write the derived descriptor next to the original; the file is replaced atomically."""
    file = derived_file(model)
    LOG.debug(f"generate {file}")
    with tempfile.NamedTemporaryFile(
        dir=file.parent, prefix=f"{DERIVED_FILE_NAME}.", suffix=".tmp", delete=False
    ) as f:
        tmp_file = Path(f.name)
        try:
            f.write(data)
        except BaseException:
            f.close()
            tmp_file.unlink(missing_ok=True)
            raise
    try:
        os.replace(tmp_file, file)
    except BaseException:
        tmp_file.unlink(missing_ok=True)
        raise
    return file


def _update_version_elements(
    container: Element | None,
    entries: Sequence[Dependency | Plugin],
    element_key: Callable[[Element], str],
    label: str,
):
    for element, entry in _pair(container, entries, element_key, lambda e: e.key, label):
        if entry.version is not None:
            _set_text(element.child("version"), entry.version)


def _pair(
    container: Element | None,
    entries: Sequence[T],
    element_key: Callable[[Element], str | None],
    entry_key: Callable[[T], str | None],
    label: str,
) -> Iterable[tuple[Element, T]]:
    """Pair child elements with model entries by index; shape or key drift is fatal."""
    elements = container.children() if container is not None else []
    if len(elements) != len(entries):
        raise StructuralMismatch(
            f"{label} count differs - document:{len(elements)} model:{len(entries)}"
        )
    for index, (element, entry) in enumerate(zip(elements, entries)):
        document_key, model_key = element_key(element), entry_key(entry)
        if document_key != model_key:
            raise StructuralMismatch(
                f"{label} order differs - index:{index} document:{document_key} model:{model_key}"
            )
        yield element, entry


def _set_text(element: Element | None, value: str | None):
    if element is None or value is None:
        return
    if element.text.strip() != value:
        element.text = value


def _path(element: Element, *names: str) -> Element | None:
    for name in names:
        if element is None:
            return None
        element = element.child(name)
    return element


def _child_text(element: Element, name: str) -> str | None:
    child = element.child(name)
    return child.text.strip() if child is not None else None


def _dependency_element_key(element: Element) -> str:
    return dependency_key(
        _child_text(element, "groupId"),
        _child_text(element, "artifactId"),
        _child_text(element, "type"),
        _child_text(element, "classifier"),
    )


def _plugin_element_key(element: Element) -> str:
    return plugin_key(_child_text(element, "groupId"), _child_text(element, "artifactId"))


def _profile_key(element: Element) -> str | None:
    return _child_text(element, "id")


def _dependency_lists(section: ModelBase) -> Iterable[list[Dependency]]:
    yield section.dependencies
    if section.dependency_management:
        yield section.dependency_management


def _plugin_lists(section: ModelBase) -> Iterable[list[Plugin]]:
    if section.build is not None:
        yield section.build.plugins
        if section.build.plugin_management:
            yield section.build.plugin_management
    if section.reporting:
        yield section.reporting


def _section_label(section: ModelBase) -> str:
    return f"profile {section.id} " if isinstance(section, Profile) else ""
