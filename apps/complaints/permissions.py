from rest_framework import permissions

from apps.core.permissions import IsAdmin


class ComplaintPermission(permissions.BasePermission):
    """
    Any signed-in student may file a complaint; reviewing them is staff work.
    """

    message = IsAdmin.message

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if view.action == "create":
            return True
        return request.user.is_staff
