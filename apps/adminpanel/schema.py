from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, OpenApiTypes

from apps.complaints.serializers import ComplaintSerializer
from apps.core.schema import UNAUTHORIZED_RESPONSE, error_response
from apps.users.serializers import UserSerializer

ADMIN_ONLY_RESPONSE = error_response("Not staff", 403, "Admin access required.")

ADMIN_USERS_SCHEMA = {
    "summary": "Search users",
    "parameters": [
        OpenApiParameter("search", OpenApiTypes.STR, description="Matches name or email"),
        OpenApiParameter("limit", OpenApiTypes.INT, description="Defaults to 10"),
    ],
    "responses": {
        200: OpenApiResponse(response=UserSerializer(many=True)),
        401: UNAUTHORIZED_RESPONSE,
        403: ADMIN_ONLY_RESPONSE,
    },
}

ADMIN_USER_DETAIL_SCHEMA = {
    "summary": "User detail",
    "responses": {
        200: OpenApiResponse(response=UserSerializer),
        403: ADMIN_ONLY_RESPONSE,
        404: error_response("Unknown user", 404, "User not found"),
    },
}

ADMIN_LISTINGS_SCHEMA = {
    "summary": "Search listings",
    "parameters": [
        OpenApiParameter("search", OpenApiTypes.STR, description="Matches title or description"),
        OpenApiParameter("page", OpenApiTypes.INT, description="1-based page number"),
        OpenApiParameter("page_size", OpenApiTypes.INT, description="Defaults to 20, at most 100"),
    ],
    "responses": {
        200: OpenApiResponse(
            response=OpenApiTypes.OBJECT,
            description="{items, total, page}",
        ),
        403: ADMIN_ONLY_RESPONSE,
    },
}

ADMIN_COMPLAINTS_SCHEMA = {
    "summary": "Complaints, newest first",
    "parameters": [
        OpenApiParameter("status", OpenApiTypes.STR, description="open, resolved or dismissed"),
    ],
    "responses": {
        200: OpenApiResponse(response=ComplaintSerializer(many=True)),
        403: ADMIN_ONLY_RESPONSE,
    },
}
