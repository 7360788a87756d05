"""Combine several policies into one."""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from cspolicy.normalizer import is_fallback_directive
from cspolicy.policy import Policy

logger = structlog.get_logger()


def merge(policies: Iterable[Policy]) -> Policy:
    """Merge policies in order.

    Source-list directives (``*-src``) are combined as a union of all
    arguments. Other directives are replaced: the last policy that defines
    one wins. The result is validated and normalized again and is always
    serialized canonically.
    """
    directives: dict[str, list[str]] = {}
    count = 0
    for policy in policies:
        count += 1
        for name, arguments in policy.directives_map.items():
            if is_fallback_directive(name):
                accumulated = directives.setdefault(name, [])
                for token in arguments:
                    if token not in accumulated:
                        accumulated.append(token)
            else:
                directives[name] = list(arguments)
    merged = Policy.from_map(directives)
    logger.debug("policy_merged", policies=count, directives=len(merged))
    return merged
