
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action

from apps.core.views import BaseResponseMixin

from .filters import ComplaintFilter
from .permissions import ComplaintPermission
from .schema import COMPLAINT_VIEW_SET_SCHEMA
from .serializers import (
    ComplaintCreateSerializer,
    ComplaintSerializer,
    ComplaintStatusSerializer,
)
from .services import ComplaintService
from .throttles import ComplaintCreateRateThrottle


@extend_schema_view(**COMPLAINT_VIEW_SET_SCHEMA)
class ComplaintViewSet(viewsets.GenericViewSet, BaseResponseMixin):
    """
    - File: POST /complaints/
    - Review queue (staff): GET /complaints/?status=&type=
    - Change status (staff): PATCH /complaints/{id}/status/
    """

    serializer_class = ComplaintSerializer
    permission_classes = [ComplaintPermission]
    filter_backends = [DjangoFilterBackend]
    filterset_class = ComplaintFilter

    def get_queryset(self):
        return ComplaintService.get_complaints()

    def get_throttles(self):
        if self.action == "create":
            return [ComplaintCreateRateThrottle()]
        return super().get_throttles()

    def list(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(
                ComplaintSerializer(page, many=True).data
            )
        return self.success_response(
            data=ComplaintSerializer(queryset, many=True).data,
            message="Complaints retrieved successfully",
        )

    def create(self, request):
        serializer = ComplaintCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        complaint = ComplaintService.create_complaint(
            request.user,
            type=data["type"],
            description=data["description"],
            reported_user_id=data.get("reported_user"),
            reported_listing_id=data.get("reported_listing"),
        )
        return self.success_response(
            data=ComplaintSerializer(complaint).data,
            message="Complaint submitted",
            status_code=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = ComplaintStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        complaint = ComplaintService.update_status(
            pk, request.user, serializer.validated_data["status"]
        )
        return self.success_response(
            data=ComplaintSerializer(complaint).data,
            message="Complaint status updated",
        )
