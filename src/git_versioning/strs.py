"""Utilities for normalizing option names and ref names into token fragments."""

import re
from itertools import chain
from typing import Any, Iterable

_SPLIT_NON_ALPHA_NUMERIC = re.compile(r"[^a-zA-Z0-9]+")
_SPLIT_CAMEL_CASE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def tokenize(
    *inputs: Any,
    non_alpha_numeric: bool = True,
    camel_case: bool = True,
    lower: bool = True,
) -> Iterable[str]:
    """Yield normalized token fragments from mixed input values.

    Examples:
        >>> list(tokenize("versioning.preferTags"))
        ['versioning', 'prefer', 'tags']
        >>> list(tokenize("git.tag", lower=False))
        ['git', 'tag']
    """
    value_strs = _strings(*inputs)
    if non_alpha_numeric:
        value_strs = split_non_alpha_numeric(*value_strs)
    if camel_case:
        value_strs = split_camel_case(*value_strs)
    for value_str in value_strs:
        if not value_str:
            continue
        if lower:
            value_str = value_str.lower()
        yield value_str


def slugify(value: str) -> str:
    """Identifier safe form of a ref name: lower cased, path separators replaced."""
    return value.replace("/", "-").lower()


def split_non_alpha_numeric(*inputs: Any) -> Iterable[str]:
    """Split inputs on non-alphanumeric boundaries."""
    return chain.from_iterable(
        _SPLIT_NON_ALPHA_NUMERIC.split(s) for s in _strings(*inputs)
    )


def split_camel_case(*inputs: Any) -> Iterable[str]:
    """Split inputs on camelCase boundaries."""
    return chain.from_iterable(_SPLIT_CAMEL_CASE.split(s) for s in _strings(*inputs))


def _strings(*inputs: Any) -> Iterable[str]:
    for value in inputs:
        value_str = str(value).strip() if value is not None else None
        if value_str:
            yield value_str
