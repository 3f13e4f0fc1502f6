from drf_spectacular.utils import extend_schema

from apps.complaints.serializers import ComplaintSerializer
from apps.core.permissions import IsAdmin
from apps.core.views import BaseAPIView
from apps.listings.serializers import ListingSerializer
from apps.users.serializers import UserSerializer

from .schema import (
    ADMIN_COMPLAINTS_SCHEMA,
    ADMIN_LISTINGS_SCHEMA,
    ADMIN_USER_DETAIL_SCHEMA,
    ADMIN_USERS_SCHEMA,
)
from .services import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_USER_LIMIT,
    MAX_PAGE_SIZE,
    AdminPanelService,
    parse_positive_int,
)


class AdminUserListView(BaseAPIView):
    """GET /admin/users/?search=&limit="""

    permission_classes = [IsAdmin]

    @extend_schema(**ADMIN_USERS_SCHEMA)
    def get(self, request):
        limit = parse_positive_int(
            request.query_params.get("limit"), "limit", DEFAULT_USER_LIMIT
        )
        users = AdminPanelService.search_users(
            search=request.query_params.get("search"), limit=limit
        )
        return self.success_response(
            data=UserSerializer(users, many=True).data,
            message="Users retrieved successfully",
        )


class AdminUserDetailView(BaseAPIView):
    permission_classes = [IsAdmin]

    @extend_schema(**ADMIN_USER_DETAIL_SCHEMA)
    def get(self, request, user_id):
        user = AdminPanelService.get_user(user_id)
        return self.success_response(
            data=UserSerializer(user).data, message="User retrieved successfully"
        )


class AdminListingListView(BaseAPIView):
    """GET /admin/listings/?search=&page=&page_size="""

    permission_classes = [IsAdmin]

    @extend_schema(**ADMIN_LISTINGS_SCHEMA)
    def get(self, request):
        params = request.query_params
        page = parse_positive_int(params.get("page"), "page", 1)
        page_size = parse_positive_int(
            params.get("page_size"), "page_size", DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
        )
        items, total = AdminPanelService.search_listings(
            search=params.get("search"), page=page, page_size=page_size
        )
        return self.success_response(
            data={
                "items": ListingSerializer(items, many=True).data,
                "total": total,
                "page": page,
            },
            message="Listings retrieved successfully",
        )


class AdminComplaintListView(BaseAPIView):
    permission_classes = [IsAdmin]

    @extend_schema(**ADMIN_COMPLAINTS_SCHEMA)
    def get(self, request):
        complaints = AdminPanelService.get_complaints(
            status=request.query_params.get("status")
        )
        return self.success_response(
            data=ComplaintSerializer(complaints, many=True).data,
            message="Complaints retrieved successfully",
        )
