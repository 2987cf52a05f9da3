"""Request-context guards.

A guard is a plain callable that inspects a ``RequestContext`` and raises
``AccessDenied`` when the caller may not proceed.  Guards know nothing
about HTTP frameworks; ``modules.core.permissions`` adapts them to DRF.

Example::

    shipper_only = all_of(require_authenticated, require_role("admin", "shipper"))
    shipper_only(RequestContext(account_id=..., role="shipper", is_authenticated=True))
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

Guard = Callable[["RequestContext"], None]


class AccessDenied(Exception):
    """The request context does not satisfy a guard."""

    def __init__(self, message: str, *, authenticated: bool = True) -> None:
        super().__init__(message)
        self.authenticated = authenticated


@dataclass(frozen=True)
class RequestContext:
    """Who is calling, independent of the transport."""

    account_id: Optional[str] = None
    role: Optional[str] = None
    is_authenticated: bool = False

    @classmethod
    def anonymous(cls) -> RequestContext:
        return cls()

    @classmethod
    def from_user(cls, user) -> RequestContext:
        if user is None or not getattr(user, "is_authenticated", False):
            return cls.anonymous()
        return cls(
            account_id=str(user.pk),
            role=getattr(user, "role", None),
            is_authenticated=True,
        )


def require_authenticated(ctx: RequestContext) -> None:
    if not ctx.is_authenticated:
        raise AccessDenied("Authentication required.", authenticated=False)


def require_role(*roles: str) -> Guard:
    """Allow only callers whose role is in *roles*."""
    allowed = frozenset(roles)

    def guard(ctx: RequestContext) -> None:
        require_authenticated(ctx)
        if ctx.role not in allowed:
            raise AccessDenied(
                f"Access denied. Required role: {', '.join(sorted(allowed))}."
            )

    guard.__name__ = f"require_role({', '.join(sorted(allowed))})"
    return guard


def all_of(*guards: Guard) -> Guard:
    """Compose guards; the first failing guard wins."""

    def guard(ctx: RequestContext) -> None:
        for g in guards:
            g(ctx)

    return guard


def evaluate(guard: Guard, ctx: RequestContext) -> Optional[AccessDenied]:
    """Run *guard* and return the denial instead of raising it."""
    try:
        guard(ctx)
    except AccessDenied as exc:
        return exc
    return None
