"""Placeholder contexts and ``${name}`` template rendering for versions and properties."""

import re
from typing import Mapping

from git_versioning.errors import UndefinedPlaceholder
from git_versioning.situations import RefSituation, ResolvedVersion
from git_versioning.strs import slugify

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_SNAPSHOT_SUFFIX = re.compile(r"-SNAPSHOT$")

DIRTY_SUFFIX = "-DIRTY"
DIRTY_SNAPSHOT_SUFFIX = "-SNAPSHOT"
ENV_PREFIX = "env."
ZERO_DATETIME = "00000000.000000"
ZERO_ISO_DATETIME = "0000-00-00T00:00:00Z"


def global_context(
    situation: RefSituation,
    resolved: ResolvedVersion,
    build_params: Mapping[str, str] | None = None,
    env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    Build the session wide placeholder context.

    Ref and commit derived keys come first. Build parameters (``-Dkey=value``)
    and ``env.<NAME>`` environment variables are added afterwards but never
    replace a key that is already bound.
    """
    context: dict[str, str] = {}

    commit = situation.head_commit
    context["commit"] = commit
    context["commit.short"] = commit[:7]

    timestamp = situation.head_commit_timestamp
    dt = situation.head_commit_datetime
    context["commit.timestamp"] = str(timestamp)
    context["commit.timestamp.year"] = str(dt.year)
    context["commit.timestamp.month"] = f"{dt.month:02d}"
    context["commit.timestamp.day"] = f"{dt.day:02d}"
    context["commit.timestamp.hour"] = f"{dt.hour:02d}"
    context["commit.timestamp.minute"] = f"{dt.minute:02d}"
    context["commit.timestamp.second"] = f"{dt.second:02d}"
    context["commit.timestamp.datetime"] = (
        dt.strftime("%Y%m%d.%H%M%S") if timestamp > 0 else ZERO_DATETIME
    )

    ref_type = resolved.ref_type.value
    ref_name = resolved.ref_name
    ref_slug = slugify(ref_name)
    context["ref"] = ref_name
    context["ref.slug"] = ref_slug
    context[ref_type] = ref_name
    context[f"{ref_type}.slug"] = ref_slug
    for name, value in resolved.rule.groups(ref_name).items():
        context[name] = value
        context[f"{name}.slug"] = slugify(value)

    context["dirty"] = DIRTY_SUFFIX if not situation.clean else ""
    context["dirty.snapshot"] = DIRTY_SNAPSHOT_SUFFIX if not situation.clean else ""

    for key, value in (build_params or {}).items():
        context.setdefault(key, value)
    for key, value in (env or {}).items():
        context.setdefault(f"{ENV_PREFIX}{key}", value)
    return context


def project_context(
    context: Mapping[str, str], original_version: str | None
) -> dict[str, str]:
    """Layer the per coordinate ``version`` and ``version.release`` keys on top."""
    project = dict(context)
    if original_version is not None:
        project["version"] = original_version
        project["version.release"] = _SNAPSHOT_SUFFIX.sub("", original_version, count=1)
    return project


def render(template: str, context: Mapping[str, str]) -> str:
    """Substitute every ``${name}`` in ``template``; unbound names raise."""

    def _replace(m: re.Match) -> str:
        name = m.group(1)
        if name not in context:
            raise UndefinedPlaceholder(name, template)
        return context[name]

    return _PLACEHOLDER.sub(_replace, template)


def render_version(template: str, context: Mapping[str, str]) -> str:
    """Render a version format; ``/`` is not a valid version character and becomes ``-``."""
    return render(template, context).replace("/", "-")


def git_properties(situation: RefSituation, resolved: ResolvedVersion) -> dict[str, str]:
    """Fixed set of ``git.*`` metadata properties added to every processed project."""
    timestamp = situation.head_commit_timestamp
    ref_type = resolved.ref_type.value
    ref_slug = slugify(resolved.ref_name)
    return {
        "git.commit": resolved.commit,
        "git.commit.timestamp": str(timestamp),
        "git.commit.timestamp.datetime": (
            situation.head_commit_datetime.strftime("%Y-%m-%dT%H:%M:%SZ")
            if timestamp > 0
            else ZERO_ISO_DATETIME
        ),
        "git.ref": resolved.ref_name,
        "git.ref.slug": ref_slug,
        f"git.{ref_type}": resolved.ref_name,
        f"git.{ref_type}.slug": ref_slug,
        "git.dirty": str(not situation.clean).lower(),
    }
