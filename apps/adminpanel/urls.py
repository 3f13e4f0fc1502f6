from django.urls import path

from .views import (
    AdminComplaintListView,
    AdminListingListView,
    AdminUserDetailView,
    AdminUserListView,
)

urlpatterns = [
    path("admin/users/", AdminUserListView.as_view(), name="admin-users"),
    path(
        "admin/users/<uuid:user_id>/",
        AdminUserDetailView.as_view(),
        name="admin-user-detail",
    ),
    path("admin/listings/", AdminListingListView.as_view(), name="admin-listings"),
    path(
        "admin/complaints/", AdminComplaintListView.as_view(), name="admin-complaints"
    ),
]
