import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import Forbidden, NotFound, ValidationError
from apps.listings.models import Listing

from .models import Complaint, ComplaintStatus, ComplaintType

logger = logging.getLogger("complaint_performance")

User = get_user_model()


def _lookup(model, pk, field):
    """Fetch a reported object or fail validation on ``field``."""
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, DjangoValidationError, ValueError):
        raise ValidationError({field: [_("Not found")]})


class ComplaintService:
    """
    A service layer for filing and reviewing complaints.
    """

    @staticmethod
    @transaction.atomic
    def create_complaint(
        reporter,
        type,
        description,
        reported_user_id=None,
        reported_listing_id=None,
    ) -> Complaint:
        """
        File a complaint. The reported user and listing are optional but must
        exist when given, and nobody can report themselves.
        """
        start_time = timezone.now()

        if type not in ComplaintType.values:
            raise ValidationError({"type": [_("Invalid complaint type")]})
        if not description or not str(description).strip():
            raise ValidationError({"description": [_("Description is required")]})

        reported_user = None
        if reported_user_id:
            reported_user = _lookup(User, reported_user_id, "reported_user")
            if reported_user.pk == reporter.pk:
                raise ValidationError(_("You cannot report yourself"))

        reported_listing = None
        if reported_listing_id:
            reported_listing = _lookup(Listing, reported_listing_id, "reported_listing")

        complaint = Complaint.objects.create(
            reported_by=reporter,
            reported_user=reported_user,
            reported_listing=reported_listing,
            type=type,
            description=description,
            status=ComplaintStatus.OPEN,
        )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Complaint {complaint.id} ({type}) filed by {reporter.id} in {duration:.2f}ms"
        )
        return complaint

    @staticmethod
    def update_status(complaint_id, actor, status) -> Complaint:
        if not actor.is_staff:
            raise Forbidden(_("Admin access required."))
        if status not in ComplaintStatus.values:
            raise ValidationError({"status": [_("Invalid status")]})

        try:
            complaint = Complaint.objects.get(pk=complaint_id)
        except (Complaint.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFound(_("Complaint not found"))

        complaint.status = status
        complaint.save(update_fields=["status", "updated_at"])
        logger.info(f"Complaint {complaint.id} set to {status} by {actor.id}")
        return complaint

    @staticmethod
    def get_complaints(status=None):
        """All complaints, newest first, optionally narrowed to one status."""
        complaints = Complaint.objects.select_related(
            "reported_by", "reported_user", "reported_listing__seller"
        ).order_by("-created_at")
        if status:
            if status not in ComplaintStatus.values:
                raise ValidationError({"status": [_("Invalid status")]})
            complaints = complaints.filter(status=status)
        return complaints
