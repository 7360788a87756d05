"""Error hierarchy for policy construction, parsing and evaluation.

::

    CspError
    +-- MalformedInputError    argument token with a control character or ';'
    +-- FormatError            policy string rejected by a strict parse
    +-- InvalidArgumentError   API misuse, e.g. "img-src" passed as a category
    +-- PolicyViolationError   a resource is not allowed by the policy

Catch ``CspError`` to handle all of them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cspolicy.evaluator import Violation


class CspError(Exception):
    """Base exception for all cspolicy errors."""


class MalformedInputError(CspError, ValueError):
    """An argument token contains a disallowed character."""

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"Unsupported CSP pattern: `{token}`")


class FormatError(CspError, ValueError):
    """A policy string could not be parsed."""

    def __init__(self, source: str, reason: str = "") -> None:
        self.source = source
        self.reason = reason
        message = f'Invalid CSP policy: "{source}"'
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidArgumentError(CspError, ValueError):
    """A caller passed an argument the API does not accept."""

    def __init__(self, name: str, value: object, message: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid argument {name}={value!r}: {message}")


class PolicyViolationError(CspError):
    """A resource was denied by a policy."""

    def __init__(self, violation: Violation) -> None:
        self.violation = violation
        super().__init__(
            f'CSP violation (category: "{violation.category}", resource: "{violation.resource}", '
            f'policy: "{violation.policy.to_source_string()}")'
        )

    @property
    def category(self) -> str:
        return self.violation.category

    @property
    def resource(self) -> str:
        return self.violation.resource

    @property
    def policy(self):
        return self.violation.policy
