"""Role based permission classes shared by the API."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def _is_admin(user) -> bool:
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsAdminRole(permissions.BasePermission):
    """Only users with role ``admin`` (or Django superusers)."""

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view) -> bool:  # type: ignore
        return _is_admin(request.user)


class IsAdminOrReadOnly(permissions.BasePermission):
    """Authenticated users may read, admins may write."""

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view) -> bool:  # type: ignore
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return _is_admin(user)


class IsOwnerOrAdmin(permissions.BasePermission):
    """Object-level permission: the owner of ``obj`` or an admin."""

    owner_field = "user_id"
    message = "You do not have permission to access this resource."

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        user = request.user
        if _is_admin(user):
            return True
        owner_field = getattr(view, "owner_field", self.owner_field)
        owner_id = obj
        for part in owner_field.split("__"):
            owner_id = getattr(owner_id, part, None)
        return owner_id == user.pk
