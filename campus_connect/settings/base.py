import environ
from datetime import timedelta
from pathlib import Path

from corsheaders.defaults import default_headers
import os

from .utils.get_env import env

# Initialize environment variables with django-environ
BASE_DIR = Path(__file__).resolve().parent.parent.parent
environ.Env.read_env(os.path.join(BASE_DIR, ".env"))


# -----------------------------------------------------------------------------
# Basic Config
# -----------------------------------------------------------------------------
ROOT_URLCONF = "campus_connect.urls"
ASGI_APPLICATION = "campus_connect.asgi.application"
WSGI_APPLICATION = "campus_connect.wsgi.application"
SECRET_KEY = env.get("DJANGO_SECRET_KEY", default="django-insecure$@")

# -----------------------------------------------------------------------------
# Time & Language
# -----------------------------------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# -----------------------------------------------------------------------------
# Security and Users
# -----------------------------------------------------------------------------
AUTH_USER_MODEL = "users.CustomUser"
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"
    },
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

# -----------------------------------------------------------------------------
# Applications configuration
# -----------------------------------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # 3rd party apps
    "corsheaders",
    "rest_framework",
    "rest_framework_simplejwt",
    "django_filters",
    "drf_spectacular",
    # local apps
    "apps.users.apps.UsersConfig",
    "apps.core.apps.CoreConfig",
    "apps.listings.apps.ListingsConfig",
    "apps.messaging.apps.MessagingConfig",
    "apps.notifications.apps.NotificationsConfig",
    "apps.complaints.apps.ComplaintsConfig",
    "apps.adminpanel.apps.AdminPanelConfig",
    "apps.monitoring.apps.MonitoringConfig",
]

MIDDLEWARE = [
    "corsheaders.middleware.CorsMiddleware",
    "apps.monitoring.middleware.PerformanceMonitoringMiddleware",
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [str(BASE_DIR / "templates")],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

# -----------------------------------------------------------------------------
# Rest Framework
# -----------------------------------------------------------------------------

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": (
        "apps.core.authentication.CookieJWTAuthentication",
    ),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
    "DEFAULT_PAGINATION_CLASS": "apps.core.pagination.StandardResultsSetPagination",
    "DEFAULT_FILTER_BACKENDS": ("django_filters.rest_framework.DjangoFilterBackend",),
    "DEFAULT_RENDERER_CLASSES": ("rest_framework.renderers.JSONRenderer",),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "apps.core.exceptions.custom_exception_handler",
    "DEFAULT_THROTTLE_RATES": {
        "anon": "100/day",
        "listing_create": "30/hour",
        "listing_review": "30/hour",
        "conversation_initiate": "20/hour",
        "message_send": "120/min",
        "sale_action": "30/min",
        "seller_rating": "20/hour",
        "complaint_create": "10/hour",
    },
}

# -----------------------------------------------------------------------------
# Simple JWT
# -----------------------------------------------------------------------------

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=15),  # Short-lived access tokens
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),  # Longer-lived refresh tokens
    "ROTATE_REFRESH_TOKENS": True,
    "ALGORITHM": "HS256",
    "SIGNING_KEY": env.get("DJANGO_SECRET_KEY", default="django-insecure$@"),
    "VERIFYING_KEY": None,
    "AUTH_HEADER_TYPES": ("Bearer",),
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "user_id",
    "AUTH_TOKEN_CLASSES": ("rest_framework_simplejwt.tokens.AccessToken",),
    "TOKEN_TYPE_CLAIM": "token_type",
}

# - -----------------------------------------------------------------------------
# JWT Authentication
# ------------------------------------------------------------------------------
JWT_AUTH_COOKIE = "access_token"
JWT_AUTH_REFRESH_COOKIE = "refresh_token"
JWT_AUTH_SECURE = env.get("JWT_AUTH_SECURE", default=False, cast_to=bool)
JWT_AUTH_SAMESITE = env.get("JWT_AUTH_SAMESITE", default="Lax")
JWT_AUTH_HTTPONLY = True
JWT_AUTH_PATH = "/"

# -----------------------------------------------------------------------------
# CORS Settings
# -----------------------------------------------------------------------------
CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_HEADERS = list(default_headers) + [
    "cache-control",
]


# -----------------------------------------------------------------------------
# Email
# -----------------------------------------------------------------------------

DOMAIN = env.get("DOMAIN", default="localhost:5173")
SITE_NAME = "Campus Connect"
FRONTEND_URL = env.get("FRONTEND_URL", default="http://localhost:5173")
DEFAULT_FROM_EMAIL = env.get(
    "EMAIL_FROM", default="Campus Connect <no-reply@campusconnect.local>"
)

# -----------------------------------------------------------------------------
# DRF Spectacular Settings
# -----------------------------------------------------------------------------


SPECTACULAR_SETTINGS = {
    "TITLE": "Campus Connect API",
    "DESCRIPTION": "API for the Campus Connect student marketplace",
    "VERSION": "1.0.0",
    "ENUM_NAME_OVERRIDES": {
        "ConversationStatusEnum": "apps.messaging.models.ConversationStatus",
        "SaleStatusEnum": "apps.messaging.models.SaleStatus",
        "ComplaintStatusEnum": "apps.complaints.models.ComplaintStatus",
        "ComplaintTypeEnum": "apps.complaints.models.ComplaintType",
    },
}

# -----------------------------------------------------------------------------
# Static & Media Base Configuration
# -----------------------------------------------------------------------------
STATIC_URL = "/static/"
MEDIA_URL = "/media/"
MEDIA_ROOT = str(BASE_DIR / "media_root")
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------------------------------------------
# Celery
# -----------------------------------------------------------------------------
CELERY_ACCEPT_CONTENT = ["application/json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"

# Timezone configuration
CELERY_TIMEZONE = TIME_ZONE
CELERY_ENABLE_UTC = True

from .celery.celery_beat_schedule import get_celery_beat_schedule  # noqa: E402

CELERY_BEAT_SCHEDULE = get_celery_beat_schedule()

# Task execution configuration
CELERY_TASK_ALWAYS_EAGER = False  # Set to True for synchronous execution in tests
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_TASK_IGNORE_RESULT = True

# Logging configuration for Celery
CELERY_WORKER_HIJACK_ROOT_LOGGER = False
CELERY_WORKER_LOG_FORMAT = "[%(asctime)s: %(levelname)s/%(processName)s] %(message)s"
CELERY_WORKER_TASK_LOG_FORMAT = "[%(asctime)s: %(levelname)s/%(processName)s][%(task_name)s(%(task_id)s)] %(message)s"

from .celery.celery_workers import get_worker_config  # noqa: E402

# Get worker configuration
WORKER_CONFIG = get_worker_config()

# Celery worker settings
CELERY_WORKER_PREFETCH_MULTIPLIER = WORKER_CONFIG["prefetch_multiplier"]
CELERY_WORKER_MAX_TASKS_PER_CHILD = WORKER_CONFIG["max_tasks_per_child"]
CELERY_WORKER_MAX_MEMORY_PER_CHILD = WORKER_CONFIG["max_memory_per_child"]
CELERY_WORKER_CONCURRENCY = WORKER_CONFIG["concurrency"]
CELERY_TASK_ACKS_LATE = True

# Task routing for different queues
CELERY_TASK_ROUTES = {
    "apps.notifications.tasks.*": {
        "queue": "notifications",
        "routing_key": "notifications",
    },
    "apps.messaging.tasks.*": {
        "queue": "default",
        "routing_key": "default",
    },
}

CELERY_TASK_DEFAULT_QUEUE = "default"
CELERY_TASK_QUEUES = {
    "notifications": {
        "exchange": "notifications",
        "exchange_type": "direct",
        "routing_key": "notifications",
    },
    "default": {
        "exchange": "default",
        "exchange_type": "direct",
        "routing_key": "default",
    },
}

# -----------------------------------------------------------------------------
# Import modular settings
# -----------------------------------------------------------------------------
from .utils.performance import *  # noqa: F403 F401 E402
from .utils.logging import *  # noqa: F403 F401 E402
from .utils.cache_keys import *  # noqa: F403 F401 E402
from .utils.messaging import *  # noqa: F403 F401 E402
