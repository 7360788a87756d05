"""Evaluate resource loads against a policy.

Resources and self origins are URLs, either as strings or as
:class:`urllib.parse.SplitResult`. A string without ``://`` is read as a
bare host (``"example.com"``, ``"example.com:8080/path"``).

Hosts are compared exactly as written; no case folding is applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import SplitResult, urlsplit

import structlog

from cspolicy.errors import InvalidArgumentError, PolicyViolationError
from cspolicy.keywords import DEFAULT_SRC, NONE, SCHEME_DELIMITER, SELF, SRC_SUFFIX, WILDCARD
from cspolicy.policy import Policy

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class Violation:
    """A resource load denied by a policy."""

    category: str
    resource: str
    policy: Policy


@dataclass(frozen=True, slots=True)
class Decision:
    """Outcome of :func:`evaluate`. Truthy when the resource is allowed."""

    allowed: bool
    violation: Violation | None = None

    def __bool__(self) -> bool:
        return self.allowed


def _host(netloc: str) -> str:
    """Host part of a URL authority, without userinfo or port."""
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        return host[1:end] if end != -1 else host[1:]
    return host.partition(":")[0]


def _split(locator: str | SplitResult) -> SplitResult:
    if isinstance(locator, SplitResult):
        return locator
    if SCHEME_DELIMITER not in locator and not locator.startswith("//"):
        locator = "//" + locator
    return urlsplit(locator)


def _locate(locator: str | SplitResult, name: str) -> tuple[str, str]:
    """Return ``(scheme, host)`` of a resource locator."""
    try:
        parts = _split(locator)
    except ValueError as exc:
        raise InvalidArgumentError(name, locator, str(exc)) from exc
    return parts.scheme, _host(parts.netloc)


def _as_string(locator: str | SplitResult) -> str:
    return locator.geturl() if isinstance(locator, SplitResult) else locator


def get_allowed_sources(policy: Policy, category: str) -> tuple[str, ...]:
    """Return the source list that governs a resource category.

    ``category`` is the bare name (``"img"``, ``"connect"``). Falls back to
    ``default-src`` when the category has no directive of its own.

    Example:
        >>> get_allowed_sources(Policy.parse("default-src *; img-src 'none'"), "img")
        ("'none'",)
    """
    if category.endswith(SRC_SUFFIX):
        raise InvalidArgumentError("category", category, f'Must not end with "{SRC_SUFFIX}"')
    directives = policy.directives_map
    name = f"{category}{SRC_SUFFIX}"
    if name in directives:
        return directives[name]
    if DEFAULT_SRC in directives:
        return directives[DEFAULT_SRC]
    return ()


def _matches(token: str, scheme: str, host: str) -> bool:
    if SCHEME_DELIMITER not in token:
        return token == host
    try:
        source = urlsplit(token)
    except ValueError:
        logger.debug("source_unparseable", source=token)
        return False
    return source.scheme == scheme and _host(source.netloc) == host


def is_allowed_source(
    policy: Policy,
    category: str,
    resource: str | SplitResult,
    self_origin: str | SplitResult | None = None,
) -> bool:
    """Return True if the policy allows loading ``resource`` for ``category``."""
    sources = get_allowed_sources(policy, category)
    if NONE in sources:
        return False
    if WILDCARD in sources:
        return True

    scheme, host = _locate(resource, "resource")
    if SELF in sources and self_origin is not None:
        if _locate(self_origin, "self_origin")[1] == host:
            return True

    return any(_matches(token, scheme, host) for token in sources)


def evaluate(
    policy: Policy,
    category: str,
    resource: str | SplitResult,
    self_origin: str | SplitResult | None = None,
) -> Decision:
    """Evaluate a resource load, describing the violation if it is denied."""
    if is_allowed_source(policy, category, resource, self_origin):
        return Decision(allowed=True)
    violation = Violation(category=category, resource=_as_string(resource), policy=policy)
    return Decision(allowed=False, violation=violation)


def check_source(
    policy: Policy,
    category: str,
    resource: str | SplitResult,
    self_origin: str | SplitResult | None = None,
) -> None:
    """Raise PolicyViolationError if the policy denies the resource."""
    decision = evaluate(policy, category, resource, self_origin)
    if decision.violation is not None:
        logger.warning(
            "policy_violation",
            category=category,
            resource=decision.violation.resource,
            policy=policy,
        )
        raise PolicyViolationError(decision.violation)
