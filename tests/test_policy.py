"""Tests for the Policy model: construction, views and value semantics."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from cspolicy import keywords
from cspolicy.errors import MalformedInputError
from cspolicy.policy import Directive, Policy, empty_policy


# ── Construction ─────────────────────────────────────────────────────────


class TestFromMap:
    def test_optimizes_duplicates(self):
        policy = Policy.from_map({"default-src": ["v0", "v0"]})
        assert policy.directives_map["default-src"] == ("v0",)
        assert policy.to_source_string() == "default-src v0"

    def test_rejects_semicolon(self):
        with pytest.raises(MalformedInputError):
            Policy.from_map({"default-src": ["bad;token"]})

    @pytest.mark.parametrize("token", ["a b", "a\tb", "\x00", "\x7f"])
    def test_rejects_control_characters(self, token):
        with pytest.raises(MalformedInputError):
            Policy.from_map({"img-src": [token]})

    def test_rejects_in_non_src_directives(self):
        with pytest.raises(MalformedInputError):
            Policy.from_map({"report-to": ["x;y"]})

    def test_validates_before_absorption(self):
        """A bad token is rejected even when 'none' would discard it."""
        with pytest.raises(MalformedInputError):
            Policy.from_map({"img-src": [keywords.NONE, "x;y"]})

    def test_first_bad_token_reported(self):
        with pytest.raises(MalformedInputError) as exc_info:
            Policy.from_map({"img-src": ["a;"], "default-src": ["b;"]})
        assert exc_info.value.token == "a;"

    def test_no_cached_source(self):
        policy = Policy.from_map({"img-src": ["b", "a"]})
        assert policy.to_source_string() == "img-src a b"

    def test_input_not_retained(self):
        source = {"img-src": ["a"]}
        policy = Policy.from_map(source)
        source["img-src"].append("b")
        assert policy.directives_map["img-src"] == ("a",)

    def test_empty(self):
        policy = Policy.from_map({})
        assert len(policy) == 0
        assert policy.to_source_string() == ""

    def test_generator_arguments_kept(self):
        policy = Policy.from_map({"img-src": (t for t in ["b.com", "a.com"])})
        assert policy.directives_map["img-src"] == ("a.com", "b.com")

    def test_generator_arguments_validated(self):
        with pytest.raises(MalformedInputError):
            Policy.from_map({"report-to": (t for t in ["ok", "x;y"])})

    def test_string_value_is_single_argument(self):
        policy = Policy.from_map({"report-to": "group"})
        assert policy.directives_map["report-to"] == ("group",)


class TestBuild:
    def test_all_directives(self):
        policy = Policy.build(
            connect_src=["connect-src-item"],
            default_src=["default-src-item"],
            font_src=["font-src-item"],
            img_src=["img-src-item"],
            manifest_src=["manifest-src-item"],
            media_src=["media-src-item"],
            script_src=["script-src-item"],
            style_src=["style-src-item"],
            frame_ancestors=["frame-ancestors-item"],
            navigate_to=["navigate-to-item"],
            report_uri="report-uri-value",
            report_to="report-to-value",
            upgrade_insecure_requests=True,
        )
        assert dict(policy.directives_map) == {
            "connect-src": ("connect-src-item",),
            "default-src": ("default-src-item",),
            "font-src": ("font-src-item",),
            "img-src": ("img-src-item",),
            "manifest-src": ("manifest-src-item",),
            "media-src": ("media-src-item",),
            "script-src": ("script-src-item",),
            "style-src": ("style-src-item",),
            "frame-ancestors": ("frame-ancestors-item",),
            "navigate-to": ("navigate-to-item",),
            "report-uri": ("report-uri-value",),
            "report-to": ("report-to-value",),
            "upgrade-insecure-requests": (),
        }

    def test_nothing_given(self):
        assert Policy.build() == Policy.from_map({})

    def test_report_to_accepts_list(self):
        policy = Policy.build(report_to=["group-b", "group-a"])
        assert policy.directives_map["report-to"] == ("group-b", "group-a")

    def test_upgrade_insecure_requests_false_omitted(self):
        assert "upgrade-insecure-requests" not in Policy.build(upgrade_insecure_requests=False)

    def test_upgrade_insecure_requests_serializes_bare(self):
        policy = Policy.build(default_src=[keywords.SELF], upgrade_insecure_requests=True)
        assert policy.to_source_string() == "default-src 'self'; upgrade-insecure-requests"

    def test_validates(self):
        with pytest.raises(MalformedInputError):
            Policy.build(script_src=["evil;"])

    def test_self_before_hosts(self):
        policy = Policy.build(default_src=[keywords.SELF, "google.com"])
        assert policy.to_source_string() == "default-src 'self' google.com"


class TestFromDirectives:
    def test_repeated_src_directives_accumulate(self):
        policy = Policy.from_directives([
            Directive("media-src", ("a",)),
            Directive("media-src", ("b",)),
            Directive("other"),
        ])
        assert policy.to_source_string() == "media-src a b; other"

    def test_repeated_other_directives_last_wins(self):
        policy = Policy.from_directives([
            Directive("report-to", ("first",)),
            Directive("report-to", ("second",)),
        ])
        assert policy.directives_map["report-to"] == ("second",)

    def test_validates(self):
        with pytest.raises(MalformedInputError):
            Policy.from_directives([Directive("img-src", ("x;y",))])

    def test_empty(self):
        assert Policy.from_directives([]) == Policy.from_map({})


# ── Directive ────────────────────────────────────────────────────────────


class TestDirective:
    def test_arguments_become_tuple(self):
        directive = Directive("img-src", ["a", "b"])  # type: ignore[arg-type]
        assert directive.arguments == ("a", "b")
        assert hash(directive) == hash(Directive("img-src", ("a", "b")))

    def test_equality(self):
        assert Directive("img-src", ("a",)) == Directive("img-src", ("a",))
        assert Directive("img-src", ("a",)) != Directive("img-src", ("b",))

    def test_frozen(self):
        directive = Directive("img-src")
        with pytest.raises(AttributeError):
            directive.name = "font-src"  # type: ignore[misc]

    def test_str(self):
        assert str(Directive("img-src", ("a", "b"))) == "img-src a b"
        assert str(Directive("upgrade-insecure-requests")) == "upgrade-insecure-requests"


# ── Views ────────────────────────────────────────────────────────────────


class TestViews:
    def test_directives_sorted_by_name(self):
        policy = Policy.from_map({"style-src": ["s"], "connect-src": ["c"], "report-to": ["r"]})
        assert [d.name for d in policy.directives] == ["connect-src", "report-to", "style-src"]
        assert policy.directives[0] == Directive("connect-src", ("c",))

    def test_directives_view_is_a_copy(self):
        policy = Policy.from_map({"img-src": ["a"]})
        policy.directives.clear()
        assert len(policy.directives) == 1

    def test_directives_map_read_only(self):
        policy = Policy.from_map({"img-src": ["a"]})
        with pytest.raises(TypeError):
            policy.directives_map["img-src"] = ("b",)  # type: ignore[index]

    def test_cannot_add_attributes(self):
        policy = Policy.from_map({})
        with pytest.raises(AttributeError):
            policy.extra = 1  # type: ignore[attr-defined]

    def test_contains_and_len(self):
        policy = Policy.from_map({"img-src": ["a"], "report-to": ["r"]})
        assert "img-src" in policy
        assert "font-src" not in policy
        assert len(policy) == 2


# ── Value semantics ──────────────────────────────────────────────────────


class TestEquality:
    def test_eq_and_hash(self):
        obj = Policy.build(connect_src=["x"], font_src=["y"])
        clone = Policy.build(connect_src=["x"], font_src=["y"])
        other = Policy.build(connect_src=["x"])

        assert obj == clone
        assert obj != other
        assert hash(obj) == hash(clone)
        assert hash(obj) != hash(other)

    def test_source_string_not_part_of_equality(self):
        parsed = Policy.parse("img-src b a")
        built = Policy.from_map({"img-src": ["a", "b"]})
        assert parsed == built
        assert parsed.to_source_string() != built.to_source_string()

    def test_not_equal_to_other_types(self):
        assert Policy.from_map({}) != ""
        assert Policy.from_map({}) != {}

    def test_usable_in_sets(self):
        policies = {Policy.parse("default-src *"), Policy.from_map({"default-src": ["*", "a"]})}
        assert len(policies) == 1

    def test_empty_policy(self):
        assert empty_policy() == Policy.from_map({})
        assert empty_policy().to_source_string() == ""


class TestRepr:
    def test_repr(self):
        assert repr(Policy.parse("default-src *")) == "Policy.parse('default-src *')"

    def test_str_is_source(self):
        assert str(Policy.from_map({"img-src": ["b", "a"]})) == "img-src a b"


# ── pydantic integration ─────────────────────────────────────────────────


class _Headers(BaseModel):
    csp: Policy


class TestPydantic:
    def test_validates_from_string(self):
        headers = _Headers(csp="default-src *")
        assert headers.csp == Policy.build(default_src=["*"])

    def test_accepts_policy_instance(self):
        policy = Policy.build(img_src=["a.com"])
        assert _Headers(csp=policy).csp is policy

    def test_validates_from_mapping(self):
        headers = _Headers.model_validate({"csp": {"img-src": ["b", "a"]}})
        assert headers.csp.directives_map["img-src"] == ("a", "b")

    def test_serializes_to_source_string(self):
        headers = _Headers(csp="img-src b a")
        assert headers.model_dump() == {"csp": "img-src b a"}
        assert headers.model_dump_json() == '{"csp":"img-src b a"}'

    def test_json_round_trip(self):
        headers = _Headers(csp=Policy.build(default_src=["'self'"], img_src=["*"]))
        assert _Headers.model_validate_json(headers.model_dump_json()) == headers

    def test_malformed_mapping_rejected(self):
        with pytest.raises(ValidationError):
            _Headers.model_validate({"csp": {"img-src": ["x;y"]}})

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError):
            _Headers(csp=42)  # type: ignore[arg-type]

    def test_json_schema_is_string(self):
        schema = _Headers.model_json_schema()
        assert schema["properties"]["csp"]["type"] == "string"
