from rest_framework import serializers

from apps.core.serializers import (
    ListingSummarySerializer,
    TimestampedModelSerializer,
    UserShortSerializer,
)
from apps.messaging.models import Conversation, Message


class MessageSerializer(serializers.ModelSerializer):
    """A single chat line"""

    sender = UserShortSerializer(read_only=True)
    receiver = UserShortSerializer(read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation",
            "sender",
            "receiver",
            "content",
            "listing",
            "created_at",
        ]
        read_only_fields = fields


class ConversationSerializer(TimestampedModelSerializer):
    """Conversation with participants, listing summary and initiator expanded"""

    participants = UserShortSerializer(many=True, read_only=True)
    listing = ListingSummarySerializer(read_only=True)
    initiated_by = UserShortSerializer(read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = Conversation
        fields = [
            "id",
            "participants",
            "listing",
            "status",
            "status_display",
            "initiated_by",
            "last_message_at",
            "sale_status",
            "sale_requested_at",
            "sale_confirmed_at",
            "buyer_rated",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class InitiateConversationSerializer(serializers.Serializer):
    receiver = serializers.UUIDField(
        error_messages={"required": "Receiver required", "null": "Receiver required"}
    )
    listing = serializers.UUIDField(required=False, allow_null=True)


class SendMessageSerializer(serializers.Serializer):
    receiver = serializers.UUIDField(required=False, allow_null=True)
    conversation = serializers.UUIDField(required=False, allow_null=True)
    listing = serializers.UUIDField(required=False, allow_null=True)
    content = serializers.CharField(max_length=5000, trim_whitespace=True)

    def validate(self, attrs):
        if not attrs.get("receiver") and not attrs.get("conversation"):
            raise serializers.ValidationError("receiver or conversation required")
        return attrs


class MessageQuerySerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    listing_id = serializers.UUIDField(required=False, allow_null=True)


class RateSellerSerializer(serializers.Serializer):
    rating = serializers.IntegerField(
        min_value=1,
        max_value=5,
        error_messages={
            "min_value": "Rating 1-5 required",
            "max_value": "Rating 1-5 required",
            "invalid": "Rating 1-5 required",
        },
    )


class ConfirmSaleResultSerializer(serializers.Serializer):
    listing = ListingSummarySerializer()
    conversation = ConversationSerializer()
    confirmation_message = MessageSerializer()
    rejected_conversations = serializers.IntegerField()


class RatingResultSerializer(serializers.Serializer):
    average_rating = serializers.FloatField()
    num_reviews = serializers.IntegerField()
