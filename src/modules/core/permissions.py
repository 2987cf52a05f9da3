"""DRF adapter for request-context guards."""

from __future__ import annotations

from typing import Type

from rest_framework.exceptions import NotAuthenticated, PermissionDenied
from rest_framework.permissions import BasePermission

from modules.core.guards import (
    Guard,
    RequestContext,
    all_of,
    evaluate,
    require_authenticated,
    require_role,
)


class GuardPermission(BasePermission):
    """Evaluate ``guard`` against the request before the handler runs."""

    guard: Guard = staticmethod(require_authenticated)

    def has_permission(self, request, view) -> bool:
        denial = evaluate(type(self).guard, RequestContext.from_user(request.user))
        if denial is None:
            return True
        if not denial.authenticated:
            raise NotAuthenticated(str(denial))
        raise PermissionDenied(str(denial))


def guarded(*guards: Guard) -> Type[GuardPermission]:
    """Build a DRF permission class that runs all *guards* in order."""
    composed = all_of(*guards)
    return type(
        "GuardedPermission",
        (GuardPermission,),
        {"guard": staticmethod(composed)},
    )


def role_required(*roles: str) -> Type[GuardPermission]:
    return guarded(require_role(*roles))
