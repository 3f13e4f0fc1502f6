import logging

from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated

from apps.core.serializers import ListingSummarySerializer
from apps.core.views import BaseResponseMixin
from apps.messaging.models import Conversation, Message
from apps.messaging.schema import (
    CONFIRM_SALE_RESPONSES,
    CONVERSATION_STATE_RESPONSES,
    INITIATE_CONVERSATION_RESPONSES,
    INITIATE_SALE_RESPONSES,
    MESSAGE_QUERY_PARAMETERS,
    RATE_SELLER_RESPONSES,
    SEND_MESSAGE_RESPONSES,
)
from apps.messaging.serializers import (
    ConversationSerializer,
    InitiateConversationSerializer,
    MessageQuerySerializer,
    MessageSerializer,
    RateSellerSerializer,
    SendMessageSerializer,
)
from apps.messaging.services import ConversationService
from apps.messaging.throttles import (
    ConversationInitiateRateThrottle,
    MessageSendRateThrottle,
    SaleActionRateThrottle,
    SellerRatingRateThrottle,
)

logger = logging.getLogger("messaging_performance")


class ConversationViewSet(viewsets.GenericViewSet, BaseResponseMixin):
    """
    Negotiation threads and the sale protocol.

    - List: GET /messages/conversations/
    - Initiate: POST /messages/conversations/initiate/
    - Accept: POST /messages/conversations/{id}/accept/
    - Block: POST /messages/conversations/{id}/block/
    - Initiate sale (seller): POST /messages/conversations/{id}/initiate-sale/
    - Confirm sale (buyer): POST /messages/conversations/{id}/confirm-sale/
    - Rate seller (buyer): POST /messages/conversations/{id}/rate/
    """

    queryset = Conversation.objects.all()
    serializer_class = ConversationSerializer
    permission_classes = [IsAuthenticated]

    def list(self, request):
        conversations = ConversationService.get_conversations(request.user)
        return self.success_response(
            data=ConversationSerializer(conversations, many=True).data,
            message="Conversations retrieved successfully",
        )

    @extend_schema(
        request=InitiateConversationSerializer,
        responses=INITIATE_CONVERSATION_RESPONSES,
    )
    @action(
        detail=False,
        methods=["post"],
        throttle_classes=[ConversationInitiateRateThrottle],
    )
    def initiate(self, request):
        """Open (or reuse) a conversation and send the greeting."""
        serializer = InitiateConversationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conversation, message, created = ConversationService.initiate_conversation(
            request.user,
            receiver_id=serializer.validated_data["receiver"],
            listing_id=serializer.validated_data.get("listing"),
        )

        return self.success_response(
            data={
                "conversation": ConversationSerializer(conversation).data,
                "message": MessageSerializer(message).data,
                "created": created,
            },
            message="Conversation request sent",
            status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(request=None, responses=CONVERSATION_STATE_RESPONSES)
    @action(detail=True, methods=["post"])
    def accept(self, request, pk=None):
        conversation = ConversationService.accept_conversation(request.user, pk)
        return self.success_response(
            data=ConversationSerializer(conversation).data,
            message="Conversation accepted",
        )

    @extend_schema(request=None, responses=CONVERSATION_STATE_RESPONSES)
    @action(detail=True, methods=["post"])
    def block(self, request, pk=None):
        conversation = ConversationService.block_conversation(request.user, pk)
        return self.success_response(
            data=ConversationSerializer(conversation).data,
            message="Conversation blocked",
        )

    @extend_schema(request=None, responses=INITIATE_SALE_RESPONSES)
    @action(
        detail=True,
        methods=["post"],
        url_path="initiate-sale",
        throttle_classes=[SaleActionRateThrottle],
    )
    def initiate_sale(self, request, pk=None):
        """Seller asks the buyer to confirm the purchase."""
        conversation, message = ConversationService.initiate_sale(request.user, pk)
        return self.success_response(
            data={
                "conversation": ConversationSerializer(conversation).data,
                "notification_message": MessageSerializer(message).data,
            },
            message="Sale request sent to buyer",
        )

    @extend_schema(request=None, responses=CONFIRM_SALE_RESPONSES)
    @action(
        detail=True,
        methods=["post"],
        url_path="confirm-sale",
        throttle_classes=[SaleActionRateThrottle],
    )
    def confirm_sale(self, request, pk=None):
        """Buyer confirms; every competing conversation is rejected."""
        start_time = timezone.now()

        result = ConversationService.confirm_sale(request.user, pk)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Confirm sale request handled in {duration:.2f}ms")

        return self.success_response(
            data={
                "listing": ListingSummarySerializer(result["listing"]).data,
                "conversation": ConversationSerializer(result["conversation"]).data,
                "confirmation_message": MessageSerializer(
                    result["confirmation_message"]
                ).data,
                "rejected_conversations": result["rejected_conversations"],
            },
            message="Sale confirmed successfully",
        )

    @extend_schema(request=RateSellerSerializer, responses=RATE_SELLER_RESPONSES)
    @action(
        detail=True,
        methods=["post"],
        throttle_classes=[SellerRatingRateThrottle],
    )
    def rate(self, request, pk=None):
        """Buyer rates the seller once for a confirmed sale."""
        serializer = RateSellerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = ConversationService.rate_seller(
            request.user, pk, serializer.validated_data["rating"]
        )
        return self.success_response(data=result, message="Rating recorded")


class MessageViewSet(viewsets.GenericViewSet, BaseResponseMixin):
    """
    - History: GET /messages/?user_id=&listing_id=
    - Send: POST /messages/
    """

    queryset = Message.objects.all()
    serializer_class = MessageSerializer
    permission_classes = [IsAuthenticated]

    def get_throttles(self):
        if self.action == "create":
            return [MessageSendRateThrottle()]
        return super().get_throttles()

    @extend_schema(parameters=MESSAGE_QUERY_PARAMETERS)
    def list(self, request):
        query = MessageQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        messages = ConversationService.get_messages(
            request.user,
            user_id=query.validated_data["user_id"],
            listing_id=query.validated_data.get("listing_id"),
        )
        return self.success_response(
            data=MessageSerializer(messages, many=True).data,
            message="Messages retrieved successfully",
        )

    @extend_schema(request=SendMessageSerializer, responses=SEND_MESSAGE_RESPONSES)
    def create(self, request):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        message = ConversationService.send_message(
            request.user,
            content=data["content"],
            receiver_id=data.get("receiver"),
            conversation_id=data.get("conversation"),
            listing_id=data.get("listing"),
        )
        return self.success_response(
            data=MessageSerializer(message).data,
            message="Message sent",
            status_code=status.HTTP_201_CREATED,
        )
