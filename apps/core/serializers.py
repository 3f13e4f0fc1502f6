from rest_framework import serializers
from django.contrib.auth import get_user_model

from apps.listings.models import Listing


User = get_user_model()


class TimestampedModelSerializer(serializers.ModelSerializer):
    class Meta:
        abstract = True

    created_at = serializers.DateTimeField(read_only=True, required=False)
    updated_at = serializers.DateTimeField(read_only=True, required=False)


class UserShortSerializer(serializers.ModelSerializer):
    """Serializer for a short representation of the user."""

    full_name = serializers.SerializerMethodField(read_only=True)

    class Meta:
        model = User
        fields = ["id", "email", "first_name", "last_name", "full_name"]

    def get_full_name(self, obj) -> str:
        return obj.get_full_name()


class ListingSummarySerializer(serializers.ModelSerializer):
    """Minimal listing info embedded in conversations, complaints and purchases"""

    formatted_price = serializers.SerializerMethodField()
    seller = UserShortSerializer(read_only=True)

    class Meta:
        model = Listing
        fields = [
            "id",
            "title",
            "price",
            "formatted_price",
            "category",
            "seller",
            "is_sold",
        ]

    def get_formatted_price(self, obj) -> str:
        return f"${obj.price:,.2f}"
