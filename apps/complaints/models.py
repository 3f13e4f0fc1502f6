import uuid
from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel


class ComplaintType(models.TextChoices):
    """
    What the reporting student is complaining about.
    """

    SCAM = "scam", _("Scam")
    INAPPROPRIATE = "inappropriate", _("Inappropriate Content")
    HARASSMENT = "harassment", _("Harassment")
    FAKE_LISTING = "fake_listing", _("Fake Listing")
    SPAM = "spam", _("Spam")
    OTHER = "other", _("Other")


class ComplaintStatus(models.TextChoices):
    OPEN = "open", _("Open")
    RESOLVED = "resolved", _("Resolved")
    DISMISSED = "dismissed", _("Dismissed")


class Complaint(BaseModel):
    """
    A report filed by a student against another user, a listing, or both.

    Complaints are reviewed by staff, who move them out of ``open``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reported_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="filed_complaints",
        help_text=_("User who filed this complaint"),
    )
    reported_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="complaints_against",
        help_text=_("User the complaint is about"),
    )
    reported_listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="complaints",
        help_text=_("Listing the complaint is about"),
    )
    type = models.CharField(
        max_length=20,
        choices=ComplaintType.choices,
        help_text=_("Kind of problem being reported"),
    )
    description = models.TextField(help_text=_("Details provided by the reporter"))
    status = models.CharField(
        max_length=20,
        choices=ComplaintStatus.choices,
        default=ComplaintStatus.OPEN,
        db_index=True,
        help_text=_("Current review status"),
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Complaint")
        verbose_name_plural = _("Complaints")

    def __str__(self):
        return f"Complaint {self.id} ({self.get_type_display()}) by {self.reported_by}"
