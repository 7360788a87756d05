"""Parse Content-Security-Policy header values into :class:`Policy` objects."""

from __future__ import annotations

import structlog

from cspolicy.errors import FormatError
from cspolicy.policy import Policy, empty_policy
from cspolicy.serializer import ARGUMENT_SEPARATOR, DIRECTIVE_SEPARATOR
from cspolicy.tokens import is_valid_token

logger = structlog.get_logger()

# Unicode White_Space plus the byte order mark; ASCII separators U+001C..U+001F are kept.
_WHITESPACE = (
    "\t\n\x0b\x0c\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def _check_strict(clauses: list[str], directives: dict[str, list[str]]) -> str | None:
    """Return why a strict parse rejects the input, or None if it is acceptable."""
    if len(directives) != len(clauses):
        return "repeated directive"
    for name, arguments in directives.items():
        if not name:
            return "empty directive name"
        if not is_valid_token(name):
            return f"invalid directive name `{name}`"
        for token in arguments:
            if not token:
                return f"empty argument in `{name}`"
            if not is_valid_token(token):
                return f"invalid argument `{token}` in `{name}`"
    return None


def parse(source: str, *, strict: bool = False) -> Policy:
    """Parse a policy string.

    The input is split on ``"; "`` into directives and each directive on
    single spaces into a name and its arguments. Arguments are normalized
    but, unlike :meth:`Policy.from_map`, not validated unless ``strict`` is
    set. The returned policy keeps the stripped input as its source string.

    Raises FormatError if a strict parse rejects the input. Without
    ``strict`` every string is accepted.

    Example:
        >>> parse("default-src 'self'; img-src *").directives_map["img-src"]
        ('*',)
    """
    source = source.strip(_WHITESPACE)
    if not source:
        return empty_policy()

    clauses = source.split(DIRECTIVE_SEPARATOR)
    directives: dict[str, list[str]] = {}
    for clause in clauses:
        name, *arguments = clause.split(ARGUMENT_SEPARATOR)
        # Repeated directives: the last one wins.
        directives[name] = arguments

    if strict:
        reason = _check_strict(clauses, directives)
        if reason is not None:
            raise FormatError(source, reason)

    return Policy._parsed(source, directives)


def try_parse(source: str, *, strict: bool = False) -> Policy | None:
    """Parse a policy string, returning None if it cannot be parsed."""
    try:
        return parse(source, strict=strict)
    except FormatError as exc:
        logger.debug("policy_rejected", reason=exc.reason)
        return None
