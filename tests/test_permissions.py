"""Tests for folder allow/deny resolution."""

import pytest

from explorer_gui.core.errors import ErrorKind, PermissionDeniedError
from explorer_gui.services.permissions import (
    PathRuleSet,
    RuleKind,
    is_within,
    normalize_path,
)


class TestIsWithin:
    def test_same_path(self):
        assert is_within("/a/bob", "/a/bob")

    def test_child(self):
        assert is_within("/a/bob/x", "/a/bob")

    def test_sibling_with_common_prefix(self):
        assert not is_within("/a/bob2", "/a/bob")

    def test_trailing_separator_ignored(self):
        assert is_within("/a/bob/x", "/a/bob/")
        assert is_within("/a/bob/", "/a/bob")

    def test_backslash_separator(self):
        assert is_within("C:\\Users\\bob\\file.txt", "C:\\Users\\bob")
        assert not is_within("C:\\Users\\bob2", "C:\\Users\\bob")

    def test_root(self):
        assert is_within("/anything/below", "/")

    def test_empty_root_matches_nothing(self):
        assert not is_within("/a", "")

    def test_normalize_keeps_bare_root(self):
        assert normalize_path("/") == "/"
        assert normalize_path("/a/b//") == "/a/b"


class TestPathRuleSet:
    def test_no_rules_denies(self):
        rules = PathRuleSet()
        assert rules.resolve("/anything") == RuleKind.DENY
        assert not rules.is_allowed("/anything")

    def test_uncovered_path_denied(self):
        rules = PathRuleSet.from_lists(["/home/bob"])
        assert not rules.is_allowed("/home/alice/file")

    def test_allow_covers_descendants(self):
        rules = PathRuleSet.from_lists(["/a/bob"])
        assert rules.is_allowed("/a/bob")
        assert rules.is_allowed("/a/bob/x/y/z.txt")

    def test_boundary_check(self):
        rules = PathRuleSet.from_lists(["/a/bob"])
        assert rules.resolve("/a/bob2") == RuleKind.DENY
        assert rules.resolve("/a/bob/x") == RuleKind.ALLOW

    def test_longest_match_wins(self):
        rules = PathRuleSet.from_lists(["/a", "/a/b/c"], ["/a/b"])
        assert rules.resolve("/a/x") == RuleKind.ALLOW
        assert rules.resolve("/a/b/x") == RuleKind.DENY
        assert rules.resolve("/a/b/c/x") == RuleKind.ALLOW

    def test_deny_nested_in_allow(self):
        rules = PathRuleSet.from_lists(["/home/bob"], ["/home/bob/locked"])
        assert rules.is_allowed("/home/bob/file")
        assert not rules.is_allowed("/home/bob/locked/file")

    def test_tie_resolves_deny(self):
        rules = PathRuleSet.from_lists(["/a/b"], ["/a/b/"])
        assert rules.effective_rule("/a/b/c") is None
        assert rules.resolve("/a/b/c") == RuleKind.DENY

    def test_root_rule(self):
        rules = PathRuleSet.from_lists(["/"], ["/etc"])
        assert rules.is_allowed("/home/x")
        assert not rules.is_allowed("/etc/passwd")

    def test_effective_rule_reports_matching_rule(self):
        rules = PathRuleSet.from_lists(["/a"], ["/a/b"])
        rule = rules.effective_rule("/a/b/c")
        assert rule.path == "/a/b"
        assert rule.kind == RuleKind.DENY

    def test_require_raises(self):
        rules = PathRuleSet.from_lists(["/a"])
        rules.require("/a/x")
        with pytest.raises(PermissionDeniedError) as exc_info:
            rules.require("/b/x")
        assert exc_info.value.path == "/b/x"
        assert exc_info.value.kind == ErrorKind.PERMISSION_DENIED

    def test_first_denied(self):
        rules = PathRuleSet.from_lists(["/a"])
        assert rules.first_denied(["/a/1", "/a/2"]) is None
        assert rules.first_denied(["/a/1", "/b/2", "/c/3"]) == "/b/2"

    def test_duplicates_dropped(self):
        rules = PathRuleSet.from_lists(["/a", "/a", ""], [])
        assert rules.to_lists() == (["/a"], [])


class TestRuleEditing:
    def test_with_rule_moves_between_lists(self):
        rules = PathRuleSet.from_lists(["/a", "/b"], ["/c"])
        rules = rules.with_rule("/b", RuleKind.DENY)
        assert rules.to_lists() == (["/a"], ["/c", "/b"])

    def test_with_rule_does_not_mutate(self):
        original = PathRuleSet.from_lists(["/a"])
        original.with_rule("/b", RuleKind.ALLOW)
        assert original.to_lists() == (["/a"], [])

    def test_without_rule(self):
        rules = PathRuleSet.from_lists(["/a"], ["/a/b"]).without_rule("/a/b/")
        assert rules.to_lists() == (["/a"], [])
        assert rules.is_allowed("/a/b/c")
