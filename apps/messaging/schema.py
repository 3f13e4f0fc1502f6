from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, OpenApiTypes

from apps.core.schema import UNAUTHORIZED_RESPONSE, error_response

from .serializers import (
    ConfirmSaleResultSerializer,
    ConversationSerializer,
    MessageSerializer,
    RatingResultSerializer,
)

NOT_FOUND = error_response("Conversation not found", 404, "Conversation not found")
NOT_PARTICIPANT = error_response(
    "Not a participant", 403, "Not a participant in this conversation"
)

INITIATE_CONVERSATION_RESPONSES = {
    201: OpenApiResponse(description="Conversation created and greeting sent"),
    200: OpenApiResponse(description="Existing conversation reused and greeting sent"),
    400: error_response("Missing receiver", 400, "receiver: Receiver required"),
    401: UNAUTHORIZED_RESPONSE,
    403: error_response("Blocked", 403, "This conversation has been blocked"),
    404: error_response("Receiver or listing missing", 404, "Receiver not found"),
}

CONVERSATION_STATE_RESPONSES = {
    200: OpenApiResponse(response=ConversationSerializer),
    401: UNAUTHORIZED_RESPONSE,
    403: NOT_PARTICIPANT,
    404: NOT_FOUND,
    409: error_response(
        "Conversation closed", 409, "Conversation is rejected and cannot be accepted"
    ),
}

INITIATE_SALE_RESPONSES = {
    200: OpenApiResponse(description="Sale request sent to buyer"),
    400: error_response("No listing", 400, "No listing in this conversation"),
    401: UNAUTHORIZED_RESPONSE,
    403: error_response("Not the seller", 403, "Only the seller can initiate sale"),
    404: NOT_FOUND,
    409: error_response("Already sold", 409, "Item is already sold"),
}

CONFIRM_SALE_RESPONSES = {
    200: OpenApiResponse(response=ConfirmSaleResultSerializer),
    400: error_response("No sale pending", 400, "No sale request pending"),
    401: UNAUTHORIZED_RESPONSE,
    403: error_response("Seller confirming", 403, "Seller cannot confirm their own sale"),
    404: NOT_FOUND,
    409: error_response("Already sold", 409, "Item is already sold"),
}

RATE_SELLER_RESPONSES = {
    200: OpenApiResponse(response=RatingResultSerializer),
    400: error_response("Invalid rating", 400, "rating: Rating 1-5 required"),
    401: UNAUTHORIZED_RESPONSE,
    403: error_response("Not the buyer", 403, "Only buyer can rate"),
    404: NOT_FOUND,
    409: error_response("Already rated", 409, "Already rated"),
}

SEND_MESSAGE_RESPONSES = {
    201: OpenApiResponse(response=MessageSerializer),
    400: error_response("Missing target", 400, "receiver or conversation required"),
    401: UNAUTHORIZED_RESPONSE,
    403: error_response("Not allowed", 403, "Conversation not accepted yet"),
}

MESSAGE_QUERY_PARAMETERS = [
    OpenApiParameter(
        "user_id",
        OpenApiTypes.UUID,
        required=True,
        description="The other user in the exchange",
    ),
    OpenApiParameter(
        "listing_id",
        OpenApiTypes.UUID,
        description="Only messages about this listing",
    ),
]
