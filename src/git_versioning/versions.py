"""Resolve which git ref identifies the build and order tags by version."""

import functools
import re
from typing import Any, Callable

from git_versioning import configs, logs
from git_versioning.configs import Configuration, VersionRule
from git_versioning.errors import UnresolvableVersion
from git_versioning.situations import RefSituation, RefType, ResolvedVersion

LOG = logs.logger(__file__)

_TOKEN = re.compile(r"\d+|[^\W\d_]+")
_QUALIFIER_ALIASES = {
    "a": "alpha",
    "b": "beta",
    "m": "milestone",
    "cr": "rc",
    "ga": "",
    "final": "",
    "release": "",
}
_QUALIFIER_RANKS = {
    "alpha": 0,
    "beta": 1,
    "milestone": 2,
    "rc": 3,
    "snapshot": 4,
    "": 5,
    "sp": 6,
}

DEFAULT_BRANCH_RULE = VersionRule(configs.DEFAULT_BRANCH_VERSION_FORMAT)
DEFAULT_TAG_RULE = VersionRule(configs.DEFAULT_TAG_VERSION_FORMAT)
DEFAULT_COMMIT_RULE = VersionRule(configs.DEFAULT_COMMIT_VERSION_FORMAT)


def resolve(
    situation: RefSituation, config: Configuration, prefer_tags: bool = False
) -> ResolvedVersion:
    """
    Choose the ref type, ref name and rule for the current head.

    Order of resolution:
      1) Detached head or ``prefer_tags``: tag rules in configured order, each
         scanned against head tags sorted by descending version, so the
         highest version tag matching the first matching rule wins.
      2) Detached head: the commit rule if its pattern matches the commit id,
         else the default commit rule.
      3) Branch rules in configured order, else the default branch rule.
    """
    commit = situation.head_commit
    if situation.detached or prefer_tags:
        tags = sort_versions(situation.head_tags, reverse=True)
        LOG.debug(f"sorted head tags - tags:{tags}")
        for rule in config.tag:
            for tag in tags:
                if rule.matches(tag):
                    return ResolvedVersion(RefType.TAG, tag, commit, rule)

    if situation.detached:
        rule = config.commit
        if rule is None or not rule.matches(commit):
            rule = DEFAULT_COMMIT_RULE
        return ResolvedVersion(RefType.COMMIT, commit, commit, rule)

    branch = situation.head_branch
    for rule in config.branch:
        if rule.matches(branch):
            return ResolvedVersion(RefType.BRANCH, branch, commit, rule)
    if branch is None:
        raise UnresolvableVersion(f"no ref to resolve - situation:{situation}")
    return ResolvedVersion(RefType.BRANCH, branch, commit, DEFAULT_BRANCH_RULE)


def sort_versions(values, reverse: bool = False) -> list[str]:
    return sorted(values, key=version_key, reverse=reverse)


def compare(a: str, b: str) -> int:
    """
    Compare two version strings the way Maven orders artifact versions.

    Numeric segments compare numerically, qualifiers by release maturity
    (alpha < beta < milestone < rc < snapshot < release < sp, unknown
    qualifiers last and lexically), numbers rank above qualifiers and
    trailing zero or release segments are ignored, so ``1.0 == 1``.
    """
    items_a, items_b = _items(a), _items(b)
    for i in range(max(len(items_a), len(items_b))):
        item_a = items_a[i] if i < len(items_a) else None
        item_b = items_b[i] if i < len(items_b) else None
        if result := _compare_item(item_a, item_b):
            return result
    return 0


version_key: Callable[[str], Any] = functools.cmp_to_key(compare)


def _items(version: str) -> list[int | str]:
    items: list[int | str] = []
    for token in _TOKEN.findall(version.strip().lower()):
        if token.isdigit():
            items.append(int(token))
        else:
            items.append(_QUALIFIER_ALIASES.get(token, token))
    while items and items[-1] in (0, ""):
        items.pop()
    return items


def _compare_item(a: int | str | None, b: int | str | None) -> int:
    if a is None:
        return -_compare_item(b, None) if b is not None else 0
    if isinstance(a, int):
        if b is None:
            return 1 if a > 0 else 0
        if isinstance(b, int):
            return (a > b) - (a < b)
        return 1
    if isinstance(b, int):
        return -1
    rank_a, rank_b = _qualifier_rank(a), _qualifier_rank(b if b is not None else "")
    return (rank_a > rank_b) - (rank_a < rank_b)


def _qualifier_rank(qualifier: str) -> tuple[int, str]:
    if qualifier in _QUALIFIER_RANKS:
        return _QUALIFIER_RANKS[qualifier], ""
    return len(_QUALIFIER_RANKS), qualifier
