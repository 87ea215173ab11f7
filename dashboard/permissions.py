"""
Custom permission classes for role based access control.
"""
from rest_framework.permissions import BasePermission

ACTION_ROLES = {"staff", "manager", "admin"}
MANAGER_ROLES = {"manager", "admin"}


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    if getattr(user, "is_superuser", False):
        return "admin"
    return getattr(user, "role", None)


class CanSubmitActions(BasePermission):
    """Allow forwarding actions to the care backend (staff and above)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ACTION_ROLES


class IsManager(BasePermission):
    """Approvals and rejections of removal requests."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in MANAGER_ROLES

