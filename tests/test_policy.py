"""Tests for per-placeholder policy checks.

Run with: python3 -m pytest tests/test_policy.py -v
"""

from types import MappingProxyType

from impactboard.config import Policy
from impactboard.placeholders import parse_placeholders
from impactboard.policy import (
    effective_field,
    in_scope,
    is_allowed,
    is_entity_allowed,
    is_field_allowed,
    is_field_hidden,
    is_user_selector_allowed,
    resolution_enabled,
)
from impactboard.selection import parse_selector


def _one(text):
    (p,) = parse_placeholders(text)
    return p


class TestPolicyChecks:

    def test_resolution_enabled_only_in_full_mode(self):
        assert resolution_enabled(Policy(mode="full"))
        assert not resolution_enabled(Policy(mode="template"))
        assert not resolution_enabled(Policy(mode="assets-only"))

    def test_svg_always_allowed(self):
        policy = Policy(entities=frozenset())
        assert is_entity_allowed("SVG", policy)
        assert not is_entity_allowed("USER", policy)

    def test_user_selector_bounds(self):
        policy = Policy(top_max=3)
        assert is_user_selector_allowed(parse_selector("TOP(3)"), policy)
        assert not is_user_selector_allowed(parse_selector("TOP(4)"), policy)
        assert not is_user_selector_allowed(parse_selector("ACTIVE(4)"), policy)
        assert is_user_selector_allowed(parse_selector("USERNAME(x)"), policy)
        assert not is_user_selector_allowed(None, policy)

    def test_user_selector_kind(self):
        policy = Policy(user_selectors=frozenset({"TOP"}))
        assert not is_user_selector_allowed(parse_selector("RANK(1)"), policy)
        assert not is_user_selector_allowed(parse_selector("NAME(api)"), policy)

    def test_field_checks(self):
        policy = Policy(
            fields=frozenset({"commits"}),
            public_users=MappingProxyType({"bob": frozenset({"commits"})}),
        )
        assert is_field_allowed("commits", policy)
        assert not is_field_allowed("streak", policy)
        assert not is_field_allowed("", policy)
        assert is_field_hidden("bob", "commits", policy)
        assert not is_field_hidden("alice", "commits", policy)

    def test_effective_field_for_org(self):
        assert effective_field(_one("{{IMPACTBOARD:ORG.TOTAL_PRS}}")) == "total_prs"
        assert effective_field(_one("{{IMPACTBOARD:ORG.SUMMARY.health_score}}")) == "health_score"
        assert effective_field(_one("{{IMPACTBOARD:USER.TOP(1)}}")) == ""

    def test_in_scope_takes_first_occurrences(self):
        found = parse_placeholders("{{IMPACTBOARD:ORG.A}}{{IMPACTBOARD:ORG.B}}{{IMPACTBOARD:ORG.C}}")
        assert [p.selector for p in in_scope(found, Policy(max_placeholders=2))] == ["A", "B"]
        assert in_scope(found, Policy(max_placeholders=0)) == []

    def test_is_allowed(self):
        policy = Policy(top_max=2, entities=frozenset({"USER", "ORG"}))
        assert is_allowed(_one("{{IMPACTBOARD:USER.TOP(2).commits}}"), policy)
        assert not is_allowed(_one("{{IMPACTBOARD:USER.TOP(3).commits}}"), policy)
        assert not is_allowed(_one("{{IMPACTBOARD:USER.TOP(1).bogus}}"), policy)
        assert not is_allowed(_one("{{IMPACTBOARD:REPO.TOP(1).name}}"), policy)
        assert is_allowed(_one("{{IMPACTBOARD:ORG.TOTAL_COMMITS}}"), policy)
        assert is_allowed(_one("{{IMPACTBOARD:SVG.HEATMAP}}"), policy)
        assert not is_allowed(_one("{{IMPACTBOARD:SVG.HEATMAP}}"), Policy(mode="template"))
