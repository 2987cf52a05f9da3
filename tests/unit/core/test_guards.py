"""Unit tests for request-context guards and their DRF adapter."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from rest_framework.exceptions import NotAuthenticated, PermissionDenied

from modules.core.guards import (
    AccessDenied,
    RequestContext,
    all_of,
    evaluate,
    require_authenticated,
    require_role,
)
from modules.core.permissions import guarded, role_required

pytestmark = pytest.mark.unit

CUSTOMER = RequestContext(account_id="1", role="customer", is_authenticated=True)
SHIPPER = RequestContext(account_id="2", role="shipper", is_authenticated=True)
ANON = RequestContext.anonymous()


class TestGuards:
    def test_authenticated_passes(self):
        require_authenticated(CUSTOMER)

    def test_anonymous_rejected_as_unauthenticated(self):
        with pytest.raises(AccessDenied) as exc_info:
            require_authenticated(ANON)
        assert exc_info.value.authenticated is False

    def test_role_allowed(self):
        require_role("admin", "shipper")(SHIPPER)

    def test_wrong_role_rejected_as_authenticated(self):
        with pytest.raises(AccessDenied, match="Required role: admin, shipper") as exc_info:
            require_role("shipper", "admin")(CUSTOMER)
        assert exc_info.value.authenticated is True

    def test_role_guard_checks_authentication_first(self):
        denial = evaluate(require_role("customer"), ANON)
        assert denial is not None
        assert denial.authenticated is False

    def test_all_of_first_failure_wins(self):
        calls = []

        def deny(ctx):
            calls.append("deny")
            raise AccessDenied("nope")

        def never(ctx):
            calls.append("never")

        denial = evaluate(all_of(deny, never), CUSTOMER)
        assert str(denial) == "nope"
        assert calls == ["deny"]

    def test_evaluate_returns_none_on_success(self):
        assert evaluate(require_authenticated, CUSTOMER) is None

    def test_context_from_anonymous_user(self):
        user = SimpleNamespace(is_authenticated=False)
        assert RequestContext.from_user(user) == ANON

    def test_context_from_account(self):
        user = SimpleNamespace(is_authenticated=True, pk=7, role="admin")
        ctx = RequestContext.from_user(user)
        assert ctx == RequestContext(account_id="7", role="admin", is_authenticated=True)


class TestGuardPermission:
    def _request(self, user):
        return SimpleNamespace(user=user)

    def test_grants(self):
        permission = role_required("admin")()
        user = SimpleNamespace(is_authenticated=True, pk=1, role="admin")
        assert permission.has_permission(self._request(user), view=None) is True

    def test_anonymous_raises_not_authenticated(self):
        permission = guarded(require_authenticated)()
        user = SimpleNamespace(is_authenticated=False)
        with pytest.raises(NotAuthenticated):
            permission.has_permission(self._request(user), view=None)

    def test_wrong_role_raises_permission_denied(self):
        permission = role_required("shipper")()
        user = SimpleNamespace(is_authenticated=True, pk=1, role="customer")
        with pytest.raises(PermissionDenied):
            permission.has_permission(self._request(user), view=None)
