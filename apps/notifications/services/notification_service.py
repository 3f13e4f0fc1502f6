import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import DatabaseError, transaction
from kombu.exceptions import OperationalError

from apps.notifications.models import Notification, NotificationType
from apps.users.models import CustomUser as User

logger = logging.getLogger("notifications")


class NotificationService:
    """
    A centralized service for queuing best-effort email notifications.

    Nothing here ever raises into the caller: a notification that cannot be
    stored or dispatched is logged and dropped, and the state change that
    triggered it stands.
    """

    @staticmethod
    def queue(
        recipient: User,
        notification_type: str,
        subject: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Optional[Notification]:
        """
        Store an outbox row and hand it to Celery once the surrounding
        transaction commits.
        """
        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    recipient=recipient,
                    notification_type=notification_type,
                    subject=subject,
                    message=message,
                    data=data or {},
                )
        except DatabaseError as exc:
            logger.error(
                f"Could not queue {notification_type} notification for {recipient.id}: {exc}"
            )
            return None

        transaction.on_commit(lambda: NotificationService.dispatch(notification.id))
        return notification

    @staticmethod
    def dispatch(notification_id: int) -> None:
        from apps.notifications.tasks import send_notification_task

        try:
            send_notification_task.delay(notification_id)
        except OperationalError as exc:
            # Row stays unsent and is picked up by retry_unsent_notifications
            logger.error(f"Broker unavailable for notification {notification_id}: {exc}")

    @staticmethod
    def notify_new_chat_request(receiver: User, initiator_name: str):
        site_name = settings.SITE_NAME
        return NotificationService.queue(
            receiver,
            NotificationType.NEW_CHAT_REQUEST,
            subject=f"{site_name} - New chat request",
            message=(
                f"{initiator_name} wants to chat with you on {site_name}. "
                f"Open your messages to reply: {settings.FRONTEND_URL}/messages"
            ),
            data={"initiator_name": initiator_name},
        )

    @staticmethod
    def notify_request_rejected(user: User, listing_title: str, seller_name: str):
        site_name = settings.SITE_NAME
        return NotificationService.queue(
            user,
            NotificationType.REQUEST_REJECTED,
            subject=f"{site_name} - Item no longer available",
            message=(
                f'Sorry, "{listing_title}" from {seller_name} has been sold to '
                f"another buyer, so your request has been closed. "
                f"Browse other listings at {settings.FRONTEND_URL}"
            ),
            data={"listing_title": listing_title, "seller_name": seller_name},
        )
