"""
Permissions for the events app.
"""

from rest_framework import permissions


class IsEventCreatorOrAdmin(permissions.BasePermission):
    """
    Allows reads to anyone authenticated; writes only to the event's creator,
    club admins, or users granted the object permission explicitly.
    """

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True

        user = request.user
        if not user.is_authenticated:
            return False

        if user.is_admin or obj.created_by_id == user.id:
            return True

        if request.method == "DELETE":
            return user.has_perm("events.delete_event", obj)
        return user.has_perm("events.change_event", obj)
