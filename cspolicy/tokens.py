"""Character-level validation of directive arguments."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from cspolicy.errors import MalformedInputError

_DEL = 127
_MAX_CONTROL = 32


def is_valid_token(token: str) -> bool:
    """Return True if the token has no control characters, spaces or semicolons."""
    if ";" in token:
        return False
    return not any(ord(ch) <= _MAX_CONTROL or ord(ch) == _DEL for ch in token)


def validate_token(token: str) -> None:
    """Raise MalformedInputError if the token is not a well-formed argument."""
    if not is_valid_token(token):
        raise MalformedInputError(token)


def validate_arguments(directives: Mapping[str, Sequence[str]]) -> None:
    """Validate every argument of every directive, in mapping order.

    Fails on the first malformed token.
    """
    for arguments in directives.values():
        for token in arguments:
            validate_token(token)
