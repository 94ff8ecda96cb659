"""DRF permission classes delegating to the access decision function."""

from typing import Any

from rest_framework.permissions import BasePermission
from rest_framework.request import Request

from RecitationReportApp.core.access import Actor, role_allows


def actor_for(request: Request) -> Actor | None:
    """Explicit actor context for the request's authenticated user."""
    return Actor.from_user(getattr(request, "user", None))


class AccessDecisionPermission(BasePermission):
    """Area gate for a view.

    The view names its action through `access_action` (a single AccessAction) or
    `access_actions` (mapping of viewset action -> AccessAction), or by overriding
    `get_access_action(request)`. Ownership of single records is verified by the
    domain services, which answer NotFound for records the actor does not own.
    """

    message = "You do not have permission to perform this action."

    def _action_for(self, request: Request, view: Any):
        getter = getattr(view, "get_access_action", None)
        if getter is not None:
            return getter(request)
        mapping = getattr(view, "access_actions", None)
        if mapping is not None:
            return mapping.get(getattr(view, "action", None))
        return getattr(view, "access_action", None)

    def has_permission(self, request: Request, view: Any) -> bool:
        action = self._action_for(request, view)
        if action is None:
            return False
        return role_allows(actor_for(request), action)
