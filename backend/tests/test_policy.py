"""Authorization rule table."""

import pytest

from asha_assist.security.authenticator import ANONYMOUS, Authenticated
from asha_assist.security.policy import (
    Allowed,
    AuthorizationPolicy,
    Forbidden,
    Rule,
    Unauthenticated,
    default_policy,
)
from asha_assist.security.principal import Principal, Role

WORKER = Authenticated(Principal("asha1", Role.WORKER))
ADMIN = Authenticated(Principal("admin", Role.ADMIN))


@pytest.mark.parametrize("path", ["/api/admin/stats", "/api/visits/1", "/anything"])
def test_preflight_requests_are_public(path):
    assert default_policy.evaluate("OPTIONS", path, ANONYMOUS) == Allowed()


@pytest.mark.parametrize("path", ["/api/auth/login", "/api/auth/register", "/api/auth", "/api/health"])
def test_auth_endpoints_are_public(path):
    assert default_policy.evaluate("POST", path, ANONYMOUS) == Allowed()


def test_public_prefix_does_not_leak_to_sibling_paths():
    assert default_policy.evaluate("GET", "/api/authx/secret", ANONYMOUS) == Unauthenticated()


def test_admin_paths_need_admin_role():
    assert default_policy.evaluate("GET", "/api/admin/stats", ANONYMOUS) == Unauthenticated()
    assert isinstance(default_policy.evaluate("GET", "/api/admin/stats", WORKER), Forbidden)
    assert default_policy.evaluate("GET", "/api/admin/users/3", ADMIN) == Allowed()


@pytest.mark.parametrize("path", ["/api/visits/start", "/api/visits/7", "/api/patients/exists/+91", "/translate"])
def test_worker_paths_accept_worker_and_admin(path):
    assert default_policy.evaluate("POST", path, WORKER) == Allowed()
    assert default_policy.evaluate("POST", path, ADMIN) == Allowed()
    assert default_policy.evaluate("POST", path, ANONYMOUS) == Unauthenticated()


def test_unmatched_paths_need_any_authenticated_principal():
    assert default_policy.evaluate("GET", "/api/profile", ANONYMOUS) == Unauthenticated()
    assert default_policy.evaluate("GET", "/api/profile", WORKER) == Allowed()


def test_first_matching_rule_wins():
    policy = AuthorizationPolicy(
        [
            Rule(["/api/reports/public"], "public"),
            Rule(["/api/reports/**"], frozenset({Role.ADMIN})),
        ]
    )
    assert policy.evaluate("GET", "/api/reports/public", ANONYMOUS) == Allowed()
    assert isinstance(policy.evaluate("GET", "/api/reports/daily", WORKER), Forbidden)


def test_single_segment_wildcard():
    policy = AuthorizationPolicy([Rule(["/api/visits/*/transcribe"], frozenset({Role.ADMIN}))])
    assert isinstance(policy.evaluate("POST", "/api/visits/4/transcribe", WORKER), Forbidden)
    # deeper paths fall through to the authenticated default
    assert policy.evaluate("POST", "/api/visits/4/x/transcribe", WORKER) == Allowed()
