"""Project coordinates and the keys used to pair model entries with descriptor elements."""

from dataclasses import dataclass, field

DEFAULT_DEPENDENCY_TYPE = "jar"
DEFAULT_PLUGIN_GROUP_ID = "org.apache.maven.plugins"


@dataclass(frozen=True)
class Coordinate:
    """
    Identity of a project or of a reference to one.

    Two coordinates are equal when group and artifact match; the version is
    carried along but resolved separately, so it takes no part in equality.
    """

    group_id: str | None
    artifact_id: str | None
    version: str | None = field(default=None, compare=False)

    @property
    def project_id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def matches(self, other: "Coordinate") -> bool:
        """Strict comparison including the version."""
        return self == other and self.version == other.version

    def __str__(self):
        return f"{self.project_id}:{self.version}"


def dependency_key(
    group_id: str | None,
    artifact_id: str | None,
    type: str | None = None,
    classifier: str | None = None,
) -> str:
    """Management key of a dependency: ``group:artifact:type[:classifier]``."""
    key = f"{group_id or ''}:{artifact_id or ''}:{type or DEFAULT_DEPENDENCY_TYPE}"
    if classifier:
        key += f":{classifier}"
    return key


def plugin_key(group_id: str | None, artifact_id: str | None) -> str:
    """Key of a build or report plugin: ``group:artifact``."""
    return f"{group_id or DEFAULT_PLUGIN_GROUP_ID}:{artifact_id or ''}"
