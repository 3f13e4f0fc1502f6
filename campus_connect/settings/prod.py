from .base import *  # noqa
from .base import BASE_DIR

from .utils.get_env import env

# -----------------------------------------------------------------------------
# Production Settings
# -----------------------------------------------------------------------------
DEBUG = False
SECRET_KEY = env.get("DJANGO_SECRET_KEY")
ALLOWED_HOSTS = env.list("ALLOWED_HOSTS")

# -----------------------------------------------------------------------------
# Databases for Production
# -----------------------------------------------------------------------------
DATABASES = {"default": env.db("DATABASE_URL")}

# -----------------------------------------------------------------------------
# Email Configuration - Production
# -----------------------------------------------------------------------------
EMAIL_BACKEND = "django.core.mail.backends.smtp.EmailBackend"
EMAIL_HOST = env.get("EMAIL_HOST")
EMAIL_USE_TLS = env.get("EMAIL_USE_TLS", default=True, cast_to=bool)
EMAIL_PORT = env.get("EMAIL_PORT", default=587, cast_to=int)
EMAIL_HOST_USER = env.get("EMAIL_HOST_USER")
EMAIL_HOST_PASSWORD = env.get("EMAIL_HOST_PASSWORD")

# -----------------------------------------------------------------------------
# CORS Settings - Production
# -----------------------------------------------------------------------------
CORS_ALLOW_ALL_ORIGINS = False
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS")

# -----------------------------------------------------------------------------
# Cache - Production
# -----------------------------------------------------------------------------
CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": env.get("REDIS_URL"),
        "OPTIONS": {
            "CLIENT_CLASS": "django_redis.client.DefaultClient",
        },
        "KEY_PREFIX": "campus_connect",
    }
}

# -----------------------------------------------------------------------------
# Celery - Production
# -----------------------------------------------------------------------------
CELERY_BROKER_URL = env.get("CELERY_BROKER_URL")
CELERY_RESULT_BACKEND = env.get("CELERY_RESULT_BACKEND")

# -----------------------------------------------------------------------------
# Static Files - Production
# -----------------------------------------------------------------------------
STATIC_ROOT = BASE_DIR / "static_root"

# -----------------------------------------------------------------------------
# Security Settings - Production
# -----------------------------------------------------------------------------
X_FRAME_OPTIONS = "DENY"
SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 3600
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
JWT_AUTH_SECURE = True
JWT_AUTH_SAMESITE = "Lax"
