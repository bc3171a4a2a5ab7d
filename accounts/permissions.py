from rest_framework.permissions import BasePermission

from .policy import can


def allowed(action, message="You do not have permission to perform this action."):
    """
    Permission class granting ``action`` to users the policy allows.

    The route-level check passes no resource, so use it for role-gated
    actions only. Ownership-gated actions are checked with ``can`` once the
    view has loaded the object.
    """

    class ActionPermission(BasePermission):
        def has_permission(self, request, view):
            return can(request.user, action)

    ActionPermission.message = message
    ActionPermission.__name__ = f"Allowed[{action}]"
    return ActionPermission
