import logging
import uuid

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import permissions, status
from rest_framework.decorators import action

from apps.core.exceptions import Forbidden, ValidationError
from apps.core.utils.cache_key_manager import CacheKeyManager
from apps.core.views import BaseViewSet

from .filters import ListingFilter
from .models import Listing
from .permissions import IsListingOwnerOrStaff
from .schema import (
    DELETE_LISTING_RESPONSES,
    DISTINCT_VALUES_RESPONSES,
    LISTING_FILTER_PARAMETERS,
    PURCHASES_PARAMETERS,
    PURCHASES_RESPONSES,
    REVIEW_RESPONSES,
)
from .serializers import ListingReviewSerializer, ListingSerializer
from .services import ListingService
from .throttles import ListingCreateRateThrottle, ListingReviewRateThrottle

logger = logging.getLogger("listing_performance")


class ListingViewSet(BaseViewSet):
    """
    - List/Search: GET /listings/?category=&department=&seller=&search=
    - Detail: GET /listings/{id}/
    - Create: POST /listings/
    - Update: PUT/PATCH /listings/{id}/ (seller or staff)
    - Delete: DELETE /listings/{id}/ (seller, unsold only)
    - Categories/Departments: GET /listings/categories/, /listings/departments/
    - Purchases: GET /listings/purchases/
    - Reviews: GET/POST /listings/{id}/reviews/
    """

    queryset = Listing.objects.select_related("seller", "buyer")
    serializer_class = ListingSerializer
    filterset_class = ListingFilter

    PUBLIC_ACTIONS = ["list", "retrieve", "categories", "departments"]

    def get_permissions(self):
        if self.action in self.PUBLIC_ACTIONS or (
            self.action == "reviews" and self.request.method == "GET"
        ):
            permission_classes = [permissions.AllowAny]
        elif self.action in ["update", "partial_update"]:
            permission_classes = [permissions.IsAuthenticated, IsListingOwnerOrStaff]
        else:
            permission_classes = [permissions.IsAuthenticated]
        return [permission() for permission in permission_classes]

    def get_throttles(self):
        if self.action == "create":
            return [ListingCreateRateThrottle()]
        if self.action == "reviews" and self.request.method == "POST":
            return [ListingReviewRateThrottle()]
        return super().get_throttles()

    @extend_schema(parameters=LISTING_FILTER_PARAMETERS)
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        """Listing detail, cached until the listing changes"""
        cache_key = CacheKeyManager.make_key("listing", "detail", id=kwargs.get("pk"))
        cached = cache.get(cache_key)
        if cached is not None:
            return self.success_response(
                data=cached, message="Listing retrieved successfully"
            )

        start_time = timezone.now()
        listing = self.get_object()
        data = self.get_serializer(listing).data
        cache.set(cache_key, data, settings.CACHE_TTL_SHORT)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Retrieved listing {listing.id} in {duration:.2f}ms")

        return self.success_response(data=data, message="Listing retrieved successfully")

    def perform_create(self, serializer):
        serializer.instance = ListingService.create_listing(
            self.request.user, **serializer.validated_data
        )

    def perform_update(self, serializer):
        listing = serializer.save()
        ListingService.invalidate_listing_cache(listing)

    @extend_schema(responses=DELETE_LISTING_RESPONSES)
    def destroy(self, request, *args, **kwargs):
        ListingService.delete_listing(self.get_object(), request.user)
        return self.success_response(message="Listing deleted successfully")

    @extend_schema(responses=DISTINCT_VALUES_RESPONSES)
    @action(detail=False, methods=["get"])
    def categories(self, request):
        """Distinct non-empty categories across all listings"""
        return self.success_response(
            data=ListingService.get_categories(),
            message="Categories retrieved successfully",
        )

    @extend_schema(responses=DISTINCT_VALUES_RESPONSES)
    @action(detail=False, methods=["get"])
    def departments(self, request):
        """Distinct non-empty departments across all listings"""
        return self.success_response(
            data=ListingService.get_departments(),
            message="Departments retrieved successfully",
        )

    @extend_schema(parameters=PURCHASES_PARAMETERS, responses=PURCHASES_RESPONSES)
    @action(detail=False, methods=["get"])
    def purchases(self, request):
        """Items the user bought through a confirmed sale"""
        user_id = request.query_params.get("user_id") or str(request.user.id)
        try:
            user_id = str(uuid.UUID(user_id))
        except ValueError:
            raise ValidationError({"user_id": ["Must be a valid UUID."]})
        if user_id != str(request.user.id) and not request.user.is_staff:
            raise Forbidden("You can only view your own purchases")

        cache_key = CacheKeyManager.make_key("listing_purchases", "user", user_id=user_id)
        data = cache.get(cache_key)
        if data is None:
            purchases = ListingService.get_purchases(user_id)
            data = ListingSerializer(purchases, many=True).data
            cache.set(cache_key, data, settings.CACHE_TTL_SHORT)

        return self.success_response(
            data=data, message="Purchases retrieved successfully"
        )

    @extend_schema(
        methods=["GET", "POST"],
        request=ListingReviewSerializer,
        responses=REVIEW_RESPONSES,
    )
    @action(detail=True, methods=["get", "post"])
    def reviews(self, request, pk=None):
        """List a listing's reviews or add one"""
        listing = self.get_object()

        if request.method == "GET":
            reviews = listing.reviews.select_related("reviewer")
            return self.success_response(
                data=ListingReviewSerializer(reviews, many=True).data,
                message="Reviews retrieved successfully",
            )

        serializer = ListingReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = ListingService.add_review(
            listing,
            request.user,
            rating=serializer.validated_data["rating"],
            comment=serializer.validated_data.get("comment", ""),
        )
        return self.success_response(
            data=ListingReviewSerializer(review).data,
            message="Review added",
            status_code=status.HTTP_201_CREATED,
        )
