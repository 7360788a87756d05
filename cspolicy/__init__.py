"""
cspolicy - Content-Security-Policy model, parser, merger and evaluator
"""

__version__ = "0.1.0"

from cspolicy.errors import (
    CspError,
    FormatError,
    InvalidArgumentError,
    MalformedInputError,
    PolicyViolationError,
)
from cspolicy.policy import Directive, Policy
from cspolicy.parser import parse, try_parse
from cspolicy.merger import merge
from cspolicy.serializer import serialize, to_source_string
from cspolicy.evaluator import (
    Decision,
    Violation,
    check_source,
    evaluate,
    get_allowed_sources,
    is_allowed_source,
)

__all__ = [
    "CspError",
    "Decision",
    "Directive",
    "FormatError",
    "InvalidArgumentError",
    "MalformedInputError",
    "Policy",
    "PolicyViolationError",
    "Violation",
    "check_source",
    "evaluate",
    "get_allowed_sources",
    "is_allowed_source",
    "merge",
    "parse",
    "serialize",
    "to_source_string",
    "try_parse",
]
