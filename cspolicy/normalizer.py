"""Canonical form of directive argument lists.

Source-list directives (``*-src``) are treated as sets: ``'none'`` absorbs
everything, then ``*`` absorbs everything, otherwise the distinct tokens are
sorted. Every other directive keeps its arguments verbatim.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from cspolicy.keywords import NONE, SRC_SUFFIX, WILDCARD

_ONLY_NONE: tuple[str, ...] = (NONE,)
_ONLY_WILDCARD: tuple[str, ...] = (WILDCARD,)


def is_fallback_directive(name: str) -> bool:
    """True for directives that hold a source list (name ends with ``-src``)."""
    return name.endswith(SRC_SUFFIX)


def normalize_arguments(name: str, tokens: Iterable[str]) -> tuple[str, ...]:
    """Return the canonical, immutable argument tuple for a directive."""
    tokens = tuple(tokens)
    if not is_fallback_directive(name):
        return tokens
    # 'none' is checked first: denial wins over the wildcard.
    if NONE in tokens:
        return _ONLY_NONE
    if WILDCARD in tokens:
        return _ONLY_WILDCARD
    return tuple(sorted(set(tokens)))


def normalize_directives(
    directives: Mapping[str, Iterable[str]],
) -> Mapping[str, tuple[str, ...]]:
    """Normalize every directive and return a read-only mapping."""
    return MappingProxyType(
        {name: normalize_arguments(name, tokens) for name, tokens in directives.items()}
    )
