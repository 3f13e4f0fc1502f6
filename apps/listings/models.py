import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel

MAX_LISTING_IMAGES = 4


class Listing(BaseModel):
    """
    An item a student offers for sale.

    ``is_sold`` and ``buyer`` are written only when a buyer confirms a sale
    through a conversation; the seller never changes after creation.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField()
    category = models.CharField(max_length=100, db_index=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
    )
    image = models.URLField(
        max_length=500, blank=True, help_text=_("Legacy single image URL")
    )
    images = models.JSONField(
        default=list, blank=True, help_text=_("Up to 4 image URLs")
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listings",
    )
    department = models.CharField(max_length=100, blank=True, db_index=True)
    is_sold = models.BooleanField(default=False)
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchases",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["buyer", "is_sold"], name="listing_buyer_sold_idx"),
        ]

    def __str__(self):
        return self.title


class ListingReview(BaseModel):
    """A single review of a listing; each user may review a listing once."""

    listing = models.ForeignKey(
        Listing, on_delete=models.CASCADE, related_name="reviews"
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listing_reviews",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(blank=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["listing", "reviewer"], name="unique_listing_reviewer"
            )
        ]

    def __str__(self):
        return f"{self.rating}/5 on {self.listing_id} by {self.reviewer_id}"
