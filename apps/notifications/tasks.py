import logging
from datetime import timedelta
from smtplib import SMTPException

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
from django.utils import timezone

from apps.core.tasks import BaseTaskWithRetry
from apps.notifications.models import Notification

logger = logging.getLogger("notifications")


@shared_task(bind=True, base=BaseTaskWithRetry)
def send_notification_task(self, notification_id: int):
    """
    Deliver one outbox notification by email.

    Failures are recorded on the row and retried a bounded number of times;
    they never propagate back to whatever queued the notification.
    """
    max_attempts = settings.NOTIFICATION_SETTINGS["MAX_DELIVERY_ATTEMPTS"]

    try:
        notification = Notification.objects.select_related("recipient").get(
            id=notification_id
        )
    except Notification.DoesNotExist:
        logger.warning(f"Notification {notification_id} no longer exists")
        return f"Notification {notification_id} not found"

    if notification.is_sent:
        return f"Notification {notification_id} already sent"

    notification.attempts += 1
    try:
        send_mail(
            notification.subject,
            notification.message,
            settings.DEFAULT_FROM_EMAIL,
            [notification.recipient.email],
            fail_silently=False,
        )
    except (SMTPException, OSError) as exc:
        notification.last_error = str(exc)
        notification.save(update_fields=["attempts", "last_error"])
        logger.error(
            f"Failed to send {notification.notification_type} to "
            f"{notification.recipient.email} (attempt {notification.attempts}): {exc}"
        )
        if notification.attempts < max_attempts and not self.request.is_eager:
            raise self.retry(
                exc=exc,
                countdown=settings.NOTIFICATION_SETTINGS["RETRY_COUNTDOWN_SECONDS"],
            )
        return f"Notification {notification_id} failed"

    notification.is_sent = True
    notification.sent_at = timezone.now()
    notification.last_error = ""
    notification.save(update_fields=["attempts", "is_sent", "sent_at", "last_error"])
    logger.info(
        f"Sent {notification.notification_type} notification to {notification.recipient.email}"
    )
    return f"Notification {notification_id} sent"


@shared_task(bind=True, base=BaseTaskWithRetry)
def retry_unsent_notifications(self):
    """
    Periodic sweep for notifications that never reached a worker or ran out
    of in-task retries while still under the attempt limit.
    """
    max_attempts = settings.NOTIFICATION_SETTINGS["MAX_DELIVERY_ATTEMPTS"]
    # Leave rows queued in the last few minutes to their own task
    pending = Notification.objects.filter(
        is_sent=False,
        attempts__lt=max_attempts,
        created_at__lt=timezone.now() - timedelta(minutes=5),
    ).values_list("id", flat=True)

    count = 0
    for notification_id in pending:
        send_notification_task.delay(notification_id)
        count += 1

    logger.info(f"Re-queued {count} unsent notifications")
    return f"Re-queued {count} unsent notifications"
