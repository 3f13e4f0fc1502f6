from rest_framework import permissions


class IsListingOwnerOrStaff(permissions.BasePermission):
    """
    Staff can change any listing; everyone else only their own.
    """

    message = "Only the seller can modify this listing."

    def has_object_permission(self, request, view, obj):
        if request.user.is_staff:
            return True
        return obj.seller_id == request.user.id
