from __future__ import annotations

"""Folder allow/deny rules.

Rules are folder roots. A rule covers its own path and every path nested
under it; the boundary is checked on the separator so a rule on
``/home/bob`` says nothing about ``/home/bob2``. The most specific (longest)
matching rule wins. Anything not covered is denied.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from explorer_gui.core.errors import PermissionDeniedError

SEPARATORS = ("/", "\\")


class RuleKind(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class PathRule:
    path: str
    kind: RuleKind


@dataclass(frozen=True)
class PermissionPolicy:
    allow: Tuple[PathRule, ...] = ()
    deny: Tuple[PathRule, ...] = ()


def normalize_path(path: str) -> str:
    """Strip trailing separators, keeping a bare root intact."""
    p = (path or "").strip()
    stripped = p.rstrip("/\\")
    if not stripped and p:
        return p[0]
    return stripped


def is_within(path: str, root: str) -> bool:
    """True if `path` equals `root` or lies lexically under it."""
    p = normalize_path(path)
    r = normalize_path(root)
    if not r:
        return False
    if p == r:
        return True
    if r in SEPARATORS:
        return p.startswith(r)
    return any(p.startswith(r + sep) for sep in SEPARATORS)


def parent_path(path: str) -> str:
    """Lexical parent of `path`; "" for a bare name."""
    p = normalize_path(path)
    idx = max(p.rfind(sep) for sep in SEPARATORS)
    if idx < 0:
        return ""
    if idx == 0:
        return p[0]
    return p[:idx]


def _dedupe(paths: Iterable[str]) -> List[str]:
    out: List[str] = []
    for p in paths:
        if p and p not in out:
            out.append(p)
    return out


class PathRuleSet:
    def __init__(self, policy: Optional[PermissionPolicy] = None):
        self.policy = policy or PermissionPolicy()

    @classmethod
    def from_lists(cls, editable: Iterable[str] = (), readonly: Iterable[str] = ()) -> "PathRuleSet":
        """Build from the persisted editableFolders/readonlyFolders lists."""
        allow = tuple(PathRule(normalize_path(p), RuleKind.ALLOW) for p in _dedupe(editable or ()))
        deny = tuple(PathRule(normalize_path(p), RuleKind.DENY) for p in _dedupe(readonly or ()))
        return cls(PermissionPolicy(allow=allow, deny=deny))

    def to_lists(self) -> Tuple[List[str], List[str]]:
        return [r.path for r in self.policy.allow], [r.path for r in self.policy.deny]

    def rules(self) -> List[PathRule]:
        return list(self.policy.allow) + list(self.policy.deny)

    def effective_rule(self, path: str) -> Optional[PathRule]:
        """Return the longest matching rule, or None when nothing (or a tie) decides."""
        best: Optional[PathRule] = None
        tied = False
        for rule in self.rules():
            if not is_within(path, rule.path):
                continue
            if best is None or len(rule.path) > len(best.path):
                best, tied = rule, False
            elif len(rule.path) == len(best.path) and rule.kind != best.kind:
                tied = True
        return None if tied else best

    def resolve(self, path: str) -> RuleKind:
        rule = self.effective_rule(path)
        return rule.kind if rule is not None else RuleKind.DENY

    def is_allowed(self, path: str) -> bool:
        return self.resolve(path) == RuleKind.ALLOW

    def require(self, path: str) -> None:
        if not self.is_allowed(path):
            raise PermissionDeniedError(path)

    def first_denied(self, paths: Iterable[str]) -> Optional[str]:
        for p in paths:
            if not self.is_allowed(p):
                return p
        return None

    def with_rule(self, path: str, kind: RuleKind) -> "PathRuleSet":
        """Return a copy where `path` sits only in the list for `kind`."""
        path = normalize_path(path)
        editable, readonly = self.without_rule(path).to_lists()
        if kind == RuleKind.ALLOW:
            editable.append(path)
        else:
            readonly.append(path)
        return PathRuleSet.from_lists(editable, readonly)

    def without_rule(self, path: str) -> "PathRuleSet":
        path = normalize_path(path)
        editable, readonly = self.to_lists()
        return PathRuleSet.from_lists(
            [p for p in editable if p != path],
            [p for p in readonly if p != path],
        )

    def __repr__(self) -> str:
        editable, readonly = self.to_lists()
        return f"PathRuleSet(allow={editable!r}, deny={readonly!r})"
