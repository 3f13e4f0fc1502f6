from celery.schedules import crontab

from ..utils.messaging import MESSAGING_SETTINGS


def get_celery_beat_schedule():
    """Periodic tasks run by celery beat."""
    interval = MESSAGING_SETTINGS["RECONCILE_INTERVAL_MINUTES"]
    return {
        # Finish competing-conversation rejection for sales whose fan-out
        # was interrupted after the sale was stored
        "reconcile-confirmed-sales": {
            "task": "apps.messaging.tasks.reconcile_confirmed_sales",
            "schedule": crontab(minute=f"*/{interval}"),
            "options": {
                "expires": interval * 60,
            },
        },
        # Re-queue notification emails that never left the outbox
        "retry-unsent-notifications": {
            "task": "apps.notifications.tasks.retry_unsent_notifications",
            "schedule": crontab(minute="*/10"),
            "options": {
                "expires": 600,
            },
        },
    }
