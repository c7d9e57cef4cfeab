"""Exceptions raised while resolving and propagating git derived versions."""


class GitVersioningError(Exception):
    """Base class for every failure raised by this package."""


class ConfigurationNotFound(GitVersioningError):
    """The ``.mvn`` directory or the versioning config file could not be read."""


class GitContextUnavailable(GitVersioningError):
    """No git repository (or no commit) exists for the execution root.

    Sessions treat this as a signal to disable versioning rather than a failure.
    """


class UndefinedPlaceholder(GitVersioningError, KeyError):
    """A template referenced a ``${name}`` that has no bound value."""

    def __init__(self, name: str, template: str):
        super().__init__(f"undefined placeholder - name:{name} template:{template}")
        self.name = name
        self.template = template

    def __str__(self):
        return self.args[0]


class StructuralMismatch(GitVersioningError):
    """The textual descriptor and the project model disagree on list shape or keys."""


class UnresolvableVersion(GitVersioningError):
    """No version could be resolved for a ref situation."""


class DocumentError(GitVersioningError):
    """The descriptor text is not well formed enough to be mirrored."""
