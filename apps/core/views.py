import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ModelViewSet

logger = logging.getLogger(__name__)


class BaseResponseMixin:
    """
    Standardizes the success response format across the application:

    {
        "status": "success",
        "status_code": int,
        "message": str,
        "data": Any | None
    }
    """

    def success_response(
        self, data=None, message="Success", status_code=status.HTTP_200_OK
    ):
        """Send a success response"""
        response_data = {
            "status": "success",
            "status_code": status_code,
            "message": message,
            "data": data,
        }
        return Response(response_data, status=status_code)


class BaseViewSet(ModelViewSet, BaseResponseMixin):
    """
    ModelViewSet whose CRUD actions answer in the standard envelope.

    Errors are raised, not returned: validation, permission and not-found
    failures reach the global exception handler, which renders them in the
    same envelope.
    """

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_create(serializer)
        return self.success_response(
            data=serializer.data,
            message=f"{self.get_model_name()} created successfully",
            status_code=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop("partial", False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)

        return self.success_response(
            data=serializer.data,
            message=f"{self.get_model_name()} updated successfully",
        )

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)

        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = self.get_serializer(queryset, many=True)
        return self.success_response(
            data=serializer.data,
            message=f"{self.get_model_name()} list retrieved successfully",
        )

    def get_model_name(self) -> str:
        """
        Helper method to get the model name for messages.
        """
        return self.__class__.__name__.replace("ViewSet", "")


class BaseAPIView(APIView, BaseResponseMixin):
    """APIView with the standard response helpers."""
