from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, OpenApiTypes

from apps.core.schema import UNAUTHORIZED_RESPONSE, error_response

from .serializers import ListingReviewSerializer, ListingSerializer

LISTING_FILTER_PARAMETERS = [
    OpenApiParameter("category", OpenApiTypes.STR, description="Exact category"),
    OpenApiParameter("department", OpenApiTypes.STR, description="Exact department"),
    OpenApiParameter("seller", OpenApiTypes.UUID, description="Seller id"),
    OpenApiParameter(
        "search",
        OpenApiTypes.STR,
        description="Case-insensitive match on title or description",
    ),
]

DELETE_LISTING_RESPONSES = {
    200: OpenApiResponse(description="Listing deleted"),
    401: UNAUTHORIZED_RESPONSE,
    403: error_response("Not the seller", 403, "Only the seller can delete this listing"),
    404: error_response("Listing not found", 404, "No Listing matches the given query."),
    409: error_response("Listing already sold", 409, "Cannot delete a sold listing"),
}

DISTINCT_VALUES_RESPONSES = {
    200: OpenApiResponse(
        response=OpenApiTypes.OBJECT,
        description="Sorted list of distinct non-empty values",
    ),
}

PURCHASES_PARAMETERS = [
    OpenApiParameter(
        "user_id",
        OpenApiTypes.UUID,
        description="Whose purchases to list (staff only; defaults to the caller)",
    ),
]

PURCHASES_RESPONSES = {
    200: OpenApiResponse(response=ListingSerializer(many=True)),
    401: UNAUTHORIZED_RESPONSE,
    403: error_response(
        "Someone else's purchases", 403, "You can only view your own purchases"
    ),
}

REVIEW_RESPONSES = {
    200: OpenApiResponse(response=ListingReviewSerializer(many=True)),
    201: OpenApiResponse(response=ListingReviewSerializer),
    400: error_response("Invalid rating", 400, "rating: Ensure this value is less than or equal to 5."),
    409: error_response("Duplicate review", 409, "You have already reviewed this listing."),
}
