"""
Role based access control.

``super`` users see every organization, ``admin`` users manage the
organization they belong to and ``staff`` users may only read it.  Views
combine the classes as ``IsAdminRole | ReadOnly``.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

ADMIN_ROLES = {"admin", "super"}


class IsAdminRole(BasePermission):
    """Allow access only to users with an administrative role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return can_write(getattr(request, "user", None))


class ReadOnly(BasePermission):
    """GET, HEAD and OPTIONS only."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return request.method in SAFE_METHODS


def scoped_organizations(user):
    """Organizations visible to ``user``."""
    from .models import Organization

    if not (user and user.is_authenticated):
        return Organization.objects.none()
    if getattr(user, "role", None) == "super":
        return Organization.objects.all()
    if not getattr(user, "organization_id", None):
        return Organization.objects.none()
    return Organization.objects.filter(id=user.organization_id)


def can_write(user) -> bool:
    return bool(user and user.is_authenticated and getattr(user, "role", None) in ADMIN_ROLES)
