"""Versioning rules and the configuration file they are read from."""

import functools
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from benedict import benedict

from git_versioning import logs, parsers, paths
from git_versioning.errors import ConfigurationNotFound

LOG = logs.logger(__file__)

CONFIG_DIR_NAME = ".mvn"
CONFIG_FILE_NAME = "maven-git-versioning-extension.xml"

DEFAULT_BRANCH_VERSION_FORMAT = "${branch}-SNAPSHOT"
DEFAULT_TAG_VERSION_FORMAT = "${tag}"
DEFAULT_COMMIT_VERSION_FORMAT = "${commit}"

_JAVA_NAMED_GROUP = re.compile(r"\(\?<(?![=!])")
_JAVA_NAMED_BACKREF = re.compile(r"\\k<(\w+)>")


@dataclass(frozen=True)
class PropertyRule:
    name: str
    value_format: str


@dataclass(frozen=True)
class VersionRule:
    """A ref pattern and the formats applied when it matches."""

    version_format: str
    pattern: str | None = None
    update_pom: bool | None = None
    properties: tuple[PropertyRule, ...] = ()

    def matches(self, value: str | None) -> bool:
        """Whole string match; a rule without pattern matches anything."""
        if self.pattern is None:
            return True
        return value is not None and self.regex.fullmatch(value) is not None

    @property
    def regex(self) -> re.Pattern:
        return _compile(self.pattern)

    def groups(self, value: str) -> dict[str, str]:
        """Named capture groups of the pattern applied to ``value``."""
        if self.pattern is None:
            return {}
        if match := self.regex.fullmatch(value):
            return {k: v for k, v in match.groupdict().items() if v is not None}
        return {}


@dataclass(frozen=True)
class Configuration:
    branch: tuple[VersionRule, ...] = ()
    tag: tuple[VersionRule, ...] = ()
    commit: VersionRule | None = None
    disable: bool | None = None
    prefer_tags: bool | None = None
    update_pom: bool | None = None


@dataclass
class ConfigLocation:
    """Where the configuration lives; ``root_dir`` bounds the related project tree."""

    config_dir: Path
    config_file: Path = field(init=False)

    def __post_init__(self):
        self.config_file = self.config_dir / CONFIG_FILE_NAME

    @property
    def root_dir(self) -> Path:
        return self.config_dir.parent


def locate(execution_root: Path) -> ConfigLocation:
    """Find the ``.mvn`` directory in the hierarchy of ``execution_root``."""
    config_dir = paths.find_up(execution_root, CONFIG_DIR_NAME)
    if config_dir is None or not config_dir.is_dir():
        raise ConfigurationNotFound(
            f"Can not find {CONFIG_DIR_NAME} directory in hierarchy of {execution_root}"
        )
    return ConfigLocation(config_dir)


def read(config_file: Path) -> Configuration:
    """Read and normalize the XML configuration file."""
    if not config_file.is_file():
        raise ConfigurationNotFound(f"config file not found - path:{config_file}")
    LOG.debug(f"read config - path:{config_file}")
    text = config_file.read_text(encoding="utf-8")
    try:
        data = benedict(text, format="xml", keypath_separator=None)
    except Exception as e:
        raise ConfigurationNotFound(
            f"config file unreadable - path:{config_file} error:{e}"
        ) from e
    return parse(_root_value(data))


def parse(data: dict[str, Any] | None) -> Configuration:
    """Build a ``Configuration`` from the mapping below the config root element."""
    data = data or {}
    commit = _as_list(data.get("commit"))
    return Configuration(
        branch=tuple(_rule(d, DEFAULT_BRANCH_VERSION_FORMAT) for d in _as_list(data.get("branch"))),
        tag=tuple(_rule(d, DEFAULT_TAG_VERSION_FORMAT) for d in _as_list(data.get("tag"))),
        commit=_rule(commit[0], DEFAULT_COMMIT_VERSION_FORMAT) if commit else None,
        disable=parsers.to_optional_bool(data.get("disable")),
        prefer_tags=parsers.to_optional_bool(data.get("preferTags")),
        update_pom=parsers.to_optional_bool(data.get("updatePom")),
    )


def _rule(data: dict[str, Any] | None, default_version_format: str) -> VersionRule:
    data = data or {}
    pattern = _text(data.get("pattern"))
    rule = VersionRule(
        version_format=_text(data.get("versionFormat")) or default_version_format,
        pattern=_java_pattern(pattern) if pattern is not None else None,
        update_pom=parsers.to_optional_bool(data.get("updatePom")),
        properties=tuple(_property_rule(p) for p in _as_list(data.get("property"))),
    )
    if rule.pattern is not None:
        _compile(rule.pattern)
    return rule


def _property_rule(data: dict[str, Any]) -> PropertyRule:
    name = _text(data.get("name"))
    if not name:
        raise ConfigurationNotFound(f"property rule without name - rule:{data}")
    return PropertyRule(name=name, value_format=_text(data.get("valueFormat")) or "")


def _root_value(data: dict[str, Any]) -> dict[str, Any] | None:
    if not data:
        return None
    if len(data) != 1:
        raise ConfigurationNotFound(f"config file must have a single root element - keys:{list(data)}")
    value = next(iter(data.values()))
    return dict(value) if isinstance(value, dict) else None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("#text")
        if value is None:
            return None
    return str(value).strip()


def _java_pattern(pattern: str) -> str:
    pattern = _JAVA_NAMED_GROUP.sub("(?P<", pattern)
    return _JAVA_NAMED_BACKREF.sub(r"(?P=\1)", pattern)


@functools.cache
def _compile(pattern: str) -> re.Pattern:
    return re.compile(pattern)


def property_rules(rule: VersionRule) -> dict[str, PropertyRule]:
    return {p.name: p for p in rule.properties}


def describe(config: Configuration) -> Iterable[str]:
    """Human readable lines for debug logging."""
    for name, rules in (("branch", config.branch), ("tag", config.tag)):
        for rule in rules:
            yield f"{name} - pattern:{rule.pattern} format:{rule.version_format}"
    if config.commit:
        yield f"commit - pattern:{config.commit.pattern} format:{config.commit.version_format}"
