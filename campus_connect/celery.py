import os

from celery import Celery

# set the default Django settings module for the 'celery' program.
if os.environ.get("DEBUG") == "True":
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "campus_connect.settings.dev")
else:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "campus_connect.settings.prod")

app = Celery("campus_connect")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
# - namespace='CELERY' means all celery-related configuration keys
#   should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")
app.conf.broker_connection_retry_on_startup = True

# Load task modules from all registered Django app configs.
app.autodiscover_tasks()
