"""
Runtime options and their lookup order.

Each option is looked up as a user property (``-Dname=value``), then as a
``VERSIONING_*`` environment variable, then in the configuration file.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping

from git_versioning import parsers, strs
from git_versioning.configs import Configuration, VersionRule

DISABLE = "versioning.disable"
PREFER_TAGS = "versioning.preferTags"
UPDATE_POM = "versioning.updatePom"
GIT_TAG = "git.tag"
GIT_BRANCH = "git.branch"

ENV_PREFIX = "VERSIONING_"


def env_name(name: str) -> str:
    """
    Environment variable for an option name.

    Examples:
        >>> env_name("versioning.preferTags")
        'VERSIONING_PREFER_TAGS'
        >>> env_name("git.tag")
        'VERSIONING_GIT_TAG'
    """
    tokens = list(strs.tokenize(name.removeprefix("versioning.")))
    return ENV_PREFIX + "_".join(t.upper() for t in tokens)


@dataclass
class Options:
    user_properties: Mapping[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=lambda: dict(os.environ))

    def get(self, name: str) -> str | None:
        if (value := self.user_properties.get(name)) is not None:
            return value
        return self.environ.get(env_name(name))

    def get_bool(self, name: str, *fallbacks: bool | None) -> bool:
        """Option value as a boolean; the first non ``None`` fallback otherwise."""
        if (value := self.get(name)) is not None:
            # a bare -Dname counts as set
            return parsers.to_bool(value) if value.strip() else True
        return next((f for f in fallbacks if f is not None), False)

    def disable(self, config: Configuration) -> bool:
        return self.get_bool(DISABLE, config.disable)

    def prefer_tags(self, config: Configuration) -> bool:
        return self.get_bool(PREFER_TAGS, config.prefer_tags)

    def update_pom(self, config: Configuration, rule: VersionRule) -> bool:
        """The matched rule takes precedence over the global configuration value."""
        return self.get_bool(UPDATE_POM, rule.update_pom, config.update_pom)

    @property
    def tag(self) -> str | None:
        return self.get(GIT_TAG)

    @property
    def branch(self) -> str | None:
        return self.get(GIT_BRANCH)
