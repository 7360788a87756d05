"""Immutable Content-Security-Policy model."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any
from urllib.parse import SplitResult

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic_core import core_schema

from cspolicy import keywords
from cspolicy.normalizer import normalize_directives
from cspolicy.serializer import serialize
from cspolicy.tokens import validate_arguments

if TYPE_CHECKING:
    from cspolicy.evaluator import Decision


@dataclass(frozen=True, slots=True)
class Directive:
    """A directive name with its arguments."""

    name: str
    arguments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "arguments", tuple(self.arguments))

    def __str__(self) -> str:
        return " ".join([self.name, *self.arguments])


class Policy:
    """Content-Security-Policy declaration.

    Instances are immutable. Build them with :meth:`from_map`, :meth:`build`,
    :meth:`from_directives`, :meth:`merge` or :meth:`parse`.

    Two policies are equal when their directives are equal; a policy created
    by parsing keeps the original string so that :meth:`to_source_string`
    returns it unchanged.
    """

    __slots__ = ("_directives", "_source", "_sorted")

    def __init__(self, directives: Mapping[str, str | Iterable[str]] | None = None) -> None:
        # Copy once: arguments may be one-shot iterables. A bare string is one argument.
        directives = {
            name: (arguments,) if isinstance(arguments, str) else tuple(arguments)
            for name, arguments in (directives or {}).items()
        }
        validate_arguments(directives)
        self._directives: Mapping[str, tuple[str, ...]] = normalize_directives(directives)
        self._source: str | None = None
        self._sorted: list[Directive] | None = None

    # ── Construction ────────────────────────────────────────────────────

    @classmethod
    def from_map(cls, directives: Mapping[str, str | Iterable[str]]) -> Policy:
        """Construct a policy from ``{directive: [arguments]}``.

        Raises MalformedInputError if an argument contains a control
        character, a space or a semicolon.
        """
        return cls(directives)

    @classmethod
    def from_directives(cls, directives: Iterable[Directive]) -> Policy:
        """Construct a policy from directives, merging repeated names."""
        return cls.merge(cls.from_map({d.name: d.arguments}) for d in directives)

    @classmethod
    def build(
        cls,
        *,
        connect_src: Sequence[str] | None = None,
        default_src: Sequence[str] | None = None,
        font_src: Sequence[str] | None = None,
        frame_ancestors: Sequence[str] | None = None,
        img_src: Sequence[str] | None = None,
        manifest_src: Sequence[str] | None = None,
        media_src: Sequence[str] | None = None,
        script_src: Sequence[str] | None = None,
        style_src: Sequence[str] | None = None,
        navigate_to: Sequence[str] | None = None,
        report_to: str | Sequence[str] | None = None,
        report_uri: str | Sequence[str] | None = None,
        upgrade_insecure_requests: bool = False,
    ) -> Policy:
        """Construct a policy from the well-known directives.

        Example:
            >>> Policy.build(default_src=[keywords.SELF, "google.com"]).to_source_string()
            "default-src 'self' google.com"
        """
        named: list[tuple[str, str | Sequence[str] | None]] = [
            (keywords.CONNECT_SRC, connect_src),
            (keywords.DEFAULT_SRC, default_src),
            (keywords.FONT_SRC, font_src),
            (keywords.IMG_SRC, img_src),
            (keywords.MANIFEST_SRC, manifest_src),
            (keywords.MEDIA_SRC, media_src),
            (keywords.SCRIPT_SRC, script_src),
            (keywords.STYLE_SRC, style_src),
            (keywords.FRAME_ANCESTORS, frame_ancestors),
            (keywords.NAVIGATE_TO, navigate_to),
            (keywords.REPORT_TO, report_to),
            (keywords.REPORT_URI, report_uri),
        ]
        directives: dict[str, str | Sequence[str]] = {}
        for name, arguments in named:
            if arguments is not None:
                directives[name] = arguments
        if upgrade_insecure_requests:
            directives[keywords.UPGRADE_INSECURE_REQUESTS] = []
        return cls.from_map(directives)

    @classmethod
    def merge(cls, policies: Iterable[Policy]) -> Policy:
        """Merge policies; see :func:`cspolicy.merger.merge`."""
        from cspolicy.merger import merge

        return merge(policies)

    @classmethod
    def parse(cls, source: str, *, strict: bool = False) -> Policy:
        """Parse a policy string; see :func:`cspolicy.parser.parse`."""
        from cspolicy.parser import parse

        return parse(source, strict=strict)

    @classmethod
    def try_parse(cls, source: str, *, strict: bool = False) -> Policy | None:
        """Parse a policy string, returning None on failure."""
        from cspolicy.parser import try_parse

        return try_parse(source, strict=strict)

    @classmethod
    def _parsed(cls, source: str, directives: Mapping[str, Iterable[str]]) -> Policy:
        """Build a policy from parser output without validating arguments."""
        policy = cls.__new__(cls)
        policy._directives = normalize_directives(directives)
        policy._source = source
        policy._sorted = None
        return policy

    # ── Views ───────────────────────────────────────────────────────────

    @property
    def directives_map(self) -> Mapping[str, tuple[str, ...]]:
        """Read-only ``{directive: arguments}`` mapping."""
        return self._directives

    @property
    def directives(self) -> list[Directive]:
        """Directives sorted by name."""
        if self._sorted is None:
            self._sorted = [
                Directive(name, self._directives[name]) for name in sorted(self._directives)
            ]
        return list(self._sorted)

    def __contains__(self, name: object) -> bool:
        return name in self._directives

    def __len__(self) -> int:
        return len(self._directives)

    def to_source_string(self) -> str:
        """Return the policy string.

        A parsed policy returns the string it was parsed from. Other
        policies are serialized canonically, once.
        """
        if self._source is None:
            self._source = serialize(self._directives)
        return self._source

    # ── Evaluation ──────────────────────────────────────────────────────

    def get_allowed_sources(self, category: str) -> tuple[str, ...]:
        from cspolicy.evaluator import get_allowed_sources

        return get_allowed_sources(self, category)

    def is_allowed_source(
        self,
        category: str,
        resource: str | SplitResult,
        self_origin: str | SplitResult | None = None,
    ) -> bool:
        from cspolicy.evaluator import is_allowed_source

        return is_allowed_source(self, category, resource, self_origin)

    def evaluate(
        self,
        category: str,
        resource: str | SplitResult,
        self_origin: str | SplitResult | None = None,
    ) -> Decision:
        from cspolicy.evaluator import evaluate

        return evaluate(self, category, resource, self_origin)

    def check_source(
        self,
        category: str,
        resource: str | SplitResult,
        self_origin: str | SplitResult | None = None,
    ) -> None:
        from cspolicy.evaluator import check_source

        check_source(self, category, resource, self_origin)

    # ── Value semantics ─────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Policy):
            return NotImplemented
        return dict(self._directives) == dict(other._directives)

    def __hash__(self) -> int:
        return hash(frozenset(self._directives.items()))

    def __str__(self) -> str:
        return self.to_source_string()

    def __repr__(self) -> str:
        return f"Policy.parse({self.to_source_string()!r})"

    # ── pydantic integration ────────────────────────────────────────────

    @classmethod
    def _coerce(cls, value: Any) -> Policy:
        if isinstance(value, Policy):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Mapping):
            return cls.from_map(value)
        raise ValueError(f"Expected a CSP string, got {type(value).__name__}")

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                cls.to_source_string, return_schema=core_schema.str_schema()
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> dict[str, Any]:
        return {"type": "string", "title": "Content-Security-Policy"}


_EMPTY = Policy._parsed("", MappingProxyType({}))


def empty_policy() -> Policy:
    """The policy with no directives (what an empty string parses to)."""
    return _EMPTY
