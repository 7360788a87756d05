"""Canonical string form of a directive mapping."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cspolicy.policy import Policy

DIRECTIVE_SEPARATOR = "; "
ARGUMENT_SEPARATOR = " "


def serialize(directives: Mapping[str, Sequence[str]]) -> str:
    """Build a policy string with directives sorted by name.

    Example:
        >>> serialize({"img-src": ["a.com"], "default-src": ["'self'"]})
        "default-src 'self'; img-src a.com"
    """
    clauses = []
    for name in sorted(directives):
        clauses.append(ARGUMENT_SEPARATOR.join([name, *directives[name]]))
    return DIRECTIVE_SEPARATOR.join(clauses)


def to_source_string(policy: Policy) -> str:
    """Return the parsed source of a policy, or its canonical serialization."""
    return policy.to_source_string()
