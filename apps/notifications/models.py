from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class NotificationType(models.TextChoices):
    NEW_CHAT_REQUEST = "new_chat_request", _("New Chat Request")
    REQUEST_REJECTED = "request_rejected", _("Request Rejected")


class Notification(models.Model):
    """
    Outbox row for a best-effort email. Written in the same transaction as
    the state change it reports and delivered by a Celery task after commit.
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    notification_type = models.CharField(
        max_length=50, choices=NotificationType.choices, db_index=True
    )
    subject = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_sent = models.BooleanField(default=False, db_index=True)
    attempts = models.PositiveSmallIntegerField(default=0)
    last_error = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Notification for {self.recipient.email} - {self.notification_type}"
