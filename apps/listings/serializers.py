from rest_framework import serializers

from apps.core.serializers import TimestampedModelSerializer, UserShortSerializer

from .models import MAX_LISTING_IMAGES, Listing, ListingReview


class ListingSellerSerializer(UserShortSerializer):
    """Seller summary including their reputation"""

    class Meta(UserShortSerializer.Meta):
        fields = UserShortSerializer.Meta.fields + ["average_rating", "num_reviews"]


class ListingSerializer(TimestampedModelSerializer):
    """Listing read/write serializer. Sale fields are never client writable."""

    seller = ListingSellerSerializer(read_only=True)
    buyer = UserShortSerializer(read_only=True)
    images = serializers.ListField(
        child=serializers.URLField(max_length=500), required=False
    )

    class Meta:
        model = Listing
        fields = [
            "id",
            "title",
            "description",
            "category",
            "price",
            "image",
            "images",
            "department",
            "seller",
            "is_sold",
            "buyer",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "seller", "is_sold", "buyer"]

    def validate_images(self, value):
        return value[:MAX_LISTING_IMAGES]


class ListingReviewSerializer(TimestampedModelSerializer):
    reviewer = UserShortSerializer(read_only=True)
    rating = serializers.IntegerField(min_value=1, max_value=5)

    class Meta:
        model = ListingReview
        fields = ["id", "reviewer", "rating", "comment", "created_at"]
