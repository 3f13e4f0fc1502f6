from drf_spectacular.utils import OpenApiResponse

from apps.core.schema import UNAUTHORIZED_RESPONSE, error_response

from .serializers import PublicUserSerializer, UserSerializer

ME_RESPONSE_SCHEMA = {
    200: OpenApiResponse(
        response=UserSerializer,
        description="The authenticated user's profile",
    ),
    400: error_response("Invalid profile data", 400, "first_name: Ensure this field has no more than 150 characters."),
    401: UNAUTHORIZED_RESPONSE,
}

USER_LIST_RESPONSE_SCHEMA = {
    200: OpenApiResponse(
        response=PublicUserSerializer(many=True),
        description="Every active user except the caller",
    ),
    401: UNAUTHORIZED_RESPONSE,
}
