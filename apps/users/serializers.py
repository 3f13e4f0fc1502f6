from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.core.serializers import TimestampedModelSerializer

User = get_user_model()


class UserSerializer(TimestampedModelSerializer):
    """Profile of a user as seen by the user themself and by admins."""

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "full_name",
            "college",
            "student_id_image",
            "is_verified",
            "average_rating",
            "num_reviews",
            "is_staff",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "email",
            "is_verified",
            "average_rating",
            "num_reviews",
            "is_staff",
        ]

    def get_full_name(self, obj) -> str:
        return obj.get_full_name()


class PublicUserSerializer(serializers.ModelSerializer):
    """What other students see when picking a chat partner."""

    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "full_name",
            "college",
            "average_rating",
            "num_reviews",
        ]
        read_only_fields = fields

    def get_full_name(self, obj) -> str:
        return obj.get_full_name()
