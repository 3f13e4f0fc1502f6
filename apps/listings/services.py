import logging
from typing import List

from django.conf import settings
from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.core.exceptions import Conflict, Forbidden
from apps.core.utils.cache_key_manager import CacheKeyManager
from apps.core.utils.cache_manager import CacheManager

from .models import MAX_LISTING_IMAGES, Listing, ListingReview

logger = logging.getLogger("listing_performance")


class ListingService:
    """Business rules for the listing store"""

    @staticmethod
    def create_listing(seller, **data) -> Listing:
        """Create a listing owned by ``seller``. Extra images are dropped."""
        start_time = timezone.now()

        data["images"] = list(data.get("images") or [])[:MAX_LISTING_IMAGES]
        listing = Listing.objects.create(seller=seller, **data)
        ListingService.invalidate_listing_cache(listing)

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Listing {listing.id} created in {duration:.2f}ms")
        return listing

    @staticmethod
    def delete_listing(listing: Listing, actor) -> None:
        """Only the seller may delete, and never once the item is sold."""
        if listing.seller_id != actor.id:
            raise Forbidden("Only the seller can delete this listing")
        if listing.is_sold:
            raise Conflict("Cannot delete a sold listing")

        listing_id = listing.id
        listing.delete()
        CacheManager.invalidate("listing", id=listing_id)
        logger.info(f"Listing {listing_id} deleted by {actor.id}")

    @staticmethod
    def invalidate_listing_cache(listing: Listing) -> None:
        CacheManager.invalidate("listing", id=listing.id)

    @staticmethod
    def _distinct_values(field: str, key_name: str) -> List[str]:
        cache_key = CacheKeyManager.make_key("listing", key_name)
        values = cache.get(cache_key)
        if values is not None:
            return values

        values = list(
            Listing.objects.exclude(**{field: ""})
            .order_by(field)
            .values_list(field, flat=True)
            .distinct()
        )
        cache.set(cache_key, values, settings.CACHE_TTL_MEDIUM)
        return values

    @staticmethod
    def get_categories() -> List[str]:
        return ListingService._distinct_values("category", "categories")

    @staticmethod
    def get_departments() -> List[str]:
        return ListingService._distinct_values("department", "departments")

    @staticmethod
    def get_purchases(user):
        """Sold listings bought by ``user``, most recently updated first."""
        return (
            Listing.objects.filter(buyer=user, is_sold=True)
            .select_related("seller", "buyer")
            .order_by("-updated_at")
        )

    @staticmethod
    def add_review(listing: Listing, reviewer, rating: int, comment: str = ""):
        if ListingReview.objects.filter(listing=listing, reviewer=reviewer).exists():
            raise Conflict("You have already reviewed this listing.")

        try:
            with transaction.atomic():
                review = ListingReview.objects.create(
                    listing=listing,
                    reviewer=reviewer,
                    rating=rating,
                    comment=comment,
                )
        except IntegrityError:
            # Lost a race with a concurrent submission by the same reviewer
            raise Conflict("You have already reviewed this listing.")

        logger.info(f"Review {review.id} added to listing {listing.id}")
        return review
