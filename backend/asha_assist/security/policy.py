"""
Authorization policy: an ordered table of (method, path pattern) rules.

First matching rule wins; unmatched requests need any authenticated principal.
Patterns use ``*`` for one path segment and a trailing ``/**`` for the prefix
itself plus anything below it.
"""

import re
from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence, Union

from asha_assist.security.authenticator import AuthResult, Authenticated
from asha_assist.security.principal import Role

PUBLIC = "public"
AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class Unauthenticated:
    pass


@dataclass(frozen=True)
class Forbidden:
    required: FrozenSet[Role]


Decision = Union[Allowed, Unauthenticated, Forbidden]


def _compile(pattern: str) -> "re.Pattern[str]":
    suffix = ""
    if pattern.endswith("/**"):
        pattern = pattern[:-3]
        suffix = "(?:/.*)?"
    parts = [re.escape(chunk) for chunk in pattern.split("*")]
    return re.compile("^" + "[^/]*".join(parts) + suffix + "$")


@dataclass(frozen=True)
class Rule:
    patterns: Sequence[str]
    access: Union[str, FrozenSet[Role]]
    method: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "_compiled", tuple(_compile(p) for p in self.patterns))

    def matches(self, method: str, path: str) -> bool:
        if self.method is not None and method.upper() != self.method:
            return False
        return any(regex.match(path) for regex in self._compiled)


class AuthorizationPolicy:
    def __init__(self, rules: Sequence[Rule]):
        self.rules = tuple(rules)

    def rule_for(self, method: str, path: str) -> Optional[Rule]:
        for rule in self.rules:
            if rule.matches(method, path):
                return rule
        return None

    def evaluate(self, method: str, path: str, auth: AuthResult) -> Decision:
        rule = self.rule_for(method, path)
        access = rule.access if rule else AUTHENTICATED
        if access == PUBLIC:
            return Allowed()
        if not isinstance(auth, Authenticated):
            return Unauthenticated()
        if access == AUTHENTICATED or auth.principal.role in access:
            return Allowed()
        return Forbidden(required=access)


DEFAULT_RULES = (
    Rule(["/**"], PUBLIC, method="OPTIONS"),
    Rule(["/api/auth/**", "/api/health"], PUBLIC),
    Rule(["/api/admin/**"], frozenset({Role.ADMIN})),
    Rule(["/api/visits/**", "/api/patients/**", "/translate"], frozenset({Role.WORKER, Role.ADMIN})),
)

default_policy = AuthorizationPolicy(DEFAULT_RULES)
