from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    OpenApiTypes,
    extend_schema,
)

from apps.core.schema import UNAUTHORIZED_RESPONSE, error_response

from .serializers import (
    ComplaintCreateSerializer,
    ComplaintSerializer,
    ComplaintStatusSerializer,
)

ADMIN_ONLY_RESPONSE = error_response("Not staff", 403, "Admin access required.")

COMPLAINT_VIEW_SET_SCHEMA = {
    "list": extend_schema(
        summary="List complaints",
        description="Staff only. Newest first.",
        parameters=[
            OpenApiParameter("status", OpenApiTypes.STR, description="open, resolved or dismissed"),
            OpenApiParameter("type", OpenApiTypes.STR, description="Complaint type"),
        ],
        responses={
            200: OpenApiResponse(response=ComplaintSerializer(many=True)),
            401: UNAUTHORIZED_RESPONSE,
            403: ADMIN_ONLY_RESPONSE,
        },
    ),
    "create": extend_schema(
        summary="File a complaint",
        request=ComplaintCreateSerializer,
        responses={
            201: OpenApiResponse(response=ComplaintSerializer),
            400: error_response("Missing type or description", 400, "type: This field is required."),
            401: UNAUTHORIZED_RESPONSE,
            429: error_response("Too many complaints", 429, "Too many reports submitted. Please wait before reporting again."),
        },
    ),
    "update_status": extend_schema(
        summary="Change a complaint's status",
        request=ComplaintStatusSerializer,
        responses={
            200: OpenApiResponse(response=ComplaintSerializer),
            400: error_response("Invalid status", 400, 'status: "closed" is not a valid choice.'),
            403: ADMIN_ONLY_RESPONSE,
            404: error_response("Unknown complaint", 404, "Complaint not found"),
        },
    ),
}
