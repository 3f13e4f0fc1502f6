import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.utils import timezone

from apps.complaints.services import ComplaintService
from apps.core.exceptions import NotFound, ValidationError
from apps.listings.models import Listing

logger = logging.getLogger("adminpanel_performance")

User = get_user_model()

DEFAULT_USER_LIMIT = 10
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def parse_positive_int(value, field, default, maximum=None):
    """Read an optional positive integer query parameter."""
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field: ["A valid integer is required."]})
    if number < 1:
        raise ValidationError({field: ["Must be at least 1."]})
    if maximum is not None:
        number = min(number, maximum)
    return number


class AdminPanelService:
    """Read models for the staff dashboard"""

    @staticmethod
    def search_users(search=None, limit=DEFAULT_USER_LIMIT):
        users = User.objects.order_by("-created_at")
        if search:
            users = users.filter(
                Q(first_name__icontains=search)
                | Q(last_name__icontains=search)
                | Q(email__icontains=search)
            )
        return list(users[:limit])

    @staticmethod
    def get_user(user_id):
        try:
            return User.objects.get(pk=user_id)
        except (User.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFound("User not found")

    @staticmethod
    def search_listings(search=None, page=1, page_size=DEFAULT_PAGE_SIZE):
        """
        One page of listings, newest first.

        Returns ``(items, total)`` where ``total`` counts every match, not
        just the page.
        """
        start_time = timezone.now()

        listings = Listing.objects.select_related("seller", "buyer").order_by(
            "-created_at"
        )
        if search:
            listings = listings.filter(
                Q(title__icontains=search) | Q(description__icontains=search)
            )

        total = listings.count()
        offset = (page - 1) * page_size
        items = list(listings[offset : offset + page_size])

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Admin listing page {page} ({total} total) in {duration:.2f}ms")
        return items, total

    @staticmethod
    def get_complaints(status=None):
        return ComplaintService.get_complaints(status=status)
