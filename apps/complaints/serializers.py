from rest_framework import serializers

from apps.core.serializers import ListingSummarySerializer, UserShortSerializer

from .models import Complaint, ComplaintStatus, ComplaintType


class ComplaintCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ComplaintType.choices)
    description = serializers.CharField()
    reported_user = serializers.UUIDField(required=False, allow_null=True)
    reported_listing = serializers.UUIDField(required=False, allow_null=True)


class ComplaintSerializer(serializers.ModelSerializer):
    """Full complaint as staff see it"""

    reported_by = UserShortSerializer(read_only=True)
    reported_user = UserShortSerializer(read_only=True)
    reported_listing = ListingSummarySerializer(read_only=True)
    type_display = serializers.CharField(source="get_type_display", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Complaint
        fields = [
            "id",
            "reported_by",
            "reported_user",
            "reported_listing",
            "type",
            "type_display",
            "description",
            "status",
            "status_display",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ComplaintStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ComplaintStatus.choices)
