from drf_spectacular.utils import OpenApiExample, OpenApiResponse
from rest_framework import serializers


class ErrorResponseSerializer(serializers.Serializer):
    """Shape of every error produced by the global exception handler."""

    status = serializers.CharField(default="error")
    status_code = serializers.IntegerField()
    message = serializers.CharField()
    data = serializers.JSONField(required=False, allow_null=True)


UNAUTHORIZED_EXAMPLES = [
    OpenApiExample(
        "Unauthorized",
        value={
            "status": "error",
            "status_code": 401,
            "message": "Authentication credentials were not provided.",
            "data": None,
        },
        status_codes=["401"],
    )
]


def error_response(description, status_code, message):
    """OpenApiResponse for one error status with a single example."""
    return OpenApiResponse(
        response=ErrorResponseSerializer,
        description=description,
        examples=[
            OpenApiExample(
                description,
                value={
                    "status": "error",
                    "status_code": status_code,
                    "message": message,
                    "data": None,
                },
                status_codes=[str(status_code)],
            )
        ],
    )


UNAUTHORIZED_RESPONSE = OpenApiResponse(
    response=ErrorResponseSerializer,
    description="Authentication required",
    examples=UNAUTHORIZED_EXAMPLES,
)
