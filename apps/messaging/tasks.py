import logging

from celery import shared_task
from django.db import transaction
from django.db.models import Exists, OuterRef

from apps.core.tasks import BaseTaskWithRetry
from apps.messaging.models import Conversation, SaleStatus
from apps.messaging.services import OPEN_STATUSES, ConversationService

logger = logging.getLogger("messaging_performance")


@shared_task(bind=True, base=BaseTaskWithRetry)
def reconcile_confirmed_sales(self):
    """
    Reject open conversations still attached to a listing whose sale has
    been confirmed. Safe to run at any time; already rejected threads are
    left alone.
    """
    competing = Conversation.objects.filter(
        listing=OuterRef("listing"), status__in=OPEN_STATUSES
    ).exclude(pk=OuterRef("pk"))

    confirmed = (
        Conversation.objects.filter(
            sale_status=SaleStatus.CONFIRMED, listing__isnull=False
        )
        .filter(Exists(competing))
        .select_related("listing__seller")
    )

    total = 0
    for conversation in confirmed:
        with transaction.atomic():
            total += ConversationService.reject_competing_conversations(conversation)

    if total:
        logger.warning(f"Reconciliation rejected {total} lingering conversations")
    return f"Rejected {total} lingering conversations"
