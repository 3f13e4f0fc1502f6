import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel


class ConversationStatus(models.TextChoices):
    """
    Whether the thread is open for messaging.
    """

    PENDING = "pending", _("Pending")
    ACCEPTED = "accepted", _("Accepted")
    BLOCKED = "blocked", _("Blocked")
    REJECTED = "rejected", _("Rejected")


class SaleStatus(models.TextChoices):
    """
    Progress of the sale handshake. Only ever advances
    none -> pending_confirmation -> confirmed, or resets to none on rejection.
    """

    NONE = "none", _("None")
    PENDING_CONFIRMATION = "pending_confirmation", _("Pending Confirmation")
    CONFIRMED = "confirmed", _("Confirmed")


class Conversation(BaseModel):
    """
    A negotiation thread between exactly two users, optionally about one
    listing. Which participant is the seller is derived from the listing.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    participants = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="conversations",
        help_text=_("The two users taking part in this conversation"),
    )
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="conversations",
    )
    status = models.CharField(
        max_length=20,
        choices=ConversationStatus.choices,
        default=ConversationStatus.PENDING,
        db_index=True,
    )
    initiated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="initiated_conversations",
    )
    last_message_at = models.DateTimeField(default=timezone.now, db_index=True)
    sale_status = models.CharField(
        max_length=30,
        choices=SaleStatus.choices,
        default=SaleStatus.NONE,
    )
    sale_requested_at = models.DateTimeField(null=True, blank=True)
    sale_confirmed_at = models.DateTimeField(null=True, blank=True)
    buyer_rated = models.BooleanField(default=False)

    class Meta:
        ordering = ["-last_message_at"]
        indexes = [
            models.Index(fields=["listing", "status"], name="conversation_listing_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["listing"],
                condition=models.Q(sale_status="confirmed"),
                name="one_confirmed_sale_per_listing",
            )
        ]

    def __str__(self):
        return f"Conversation {self.id} ({self.status})"


class Message(models.Model):
    """
    An immutable chat line. Written by explicit sends and by the engine's
    greeting, sale request, confirmation and rejection notices.
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="messages",
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_messages",
    )
    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_messages",
    )
    content = models.TextField()
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="messages",
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sender", "receiver"], name="message_pair_idx"),
        ]

    def __str__(self):
        return f"Message from {self.sender_id} to {self.receiver_id}"
