from rest_framework import permissions


class IsAdmin(permissions.BasePermission):
    """
    Only staff users (the admin flag) may access the view.
    """

    message = "Admin access required."

    def has_permission(self, request, view):
        return bool(
            request.user and request.user.is_authenticated and request.user.is_staff
        )
