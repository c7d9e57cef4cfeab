"""Git head situation and the version identity resolved from it."""

import enum
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path

from git_versioning.configs import VersionRule


class RefType(enum.Enum):
    BRANCH = "branch"
    TAG = "tag"
    COMMIT = "commit"


@dataclass(frozen=True)
class RefSituation:
    """State of the working tree head, supplied once per session by the git provider."""

    head_commit: str
    head_commit_timestamp: int = 0
    head_branch: str | None = None
    head_tags: tuple[str, ...] = ()
    clean: bool = True
    root_dir: Path | None = None

    @property
    def detached(self) -> bool:
        return self.head_branch is None

    @property
    def head_commit_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.head_commit_timestamp, tz=timezone.utc)

    def with_tag(self, tag: str) -> "RefSituation":
        """Force a single head tag; clears the branch so the head counts as detached."""
        return replace(self, head_branch=None, head_tags=(tag,) if tag else ())

    def with_branch(self, branch: str) -> "RefSituation":
        """Force the head branch; head tags are kept."""
        return replace(self, head_branch=branch or None)


@dataclass(frozen=True)
class ResolvedVersion:
    """Which ref identifies the build and the rule that formats its version."""

    ref_type: RefType
    ref_name: str
    commit: str
    rule: VersionRule

    def __str__(self):
        return f"{self.ref_name} ({self.ref_type.value})"
