import os
import sys
from pathlib import Path

# ─────────────────────────────────────────────────────
# “logs” directory at the project root
# ─────────────────────────────────────────────────────
LOG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "logs"

from .performance import PERFORMANCE_API_PREFIXES  # noqa: E402

PERFORMANCE_LOG_PATHS = {
    short_name: LOG_DIR / f"{short_name}_performance.log"
    for short_name in PERFORMANCE_API_PREFIXES.values()
}
MONITORING_LOG_PATH = LOG_DIR / "monitoring.log"
ERROR_LOG_PATH = LOG_DIR / "error.log"
INFO_LOG_PATH = LOG_DIR / "info.log"
THROTTLE_LOG_PATH = LOG_DIR / "throttling.log"
NOTIFICATION_LOG_PATH = LOG_DIR / "notifications.log"

# File handlers are only used outside CI
USE_FILE_LOGGING = not os.environ.get("GITHUB_ACTIONS") and not os.environ.get(
    "DISABLE_FILE_LOGGING"
)
if USE_FILE_LOGGING:
    os.makedirs(LOG_DIR, exist_ok=True)

# ─────────────────────────────────────────────────────
# base logging config
# ─────────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {"format": "%(name)-12s %(levelname)-8s %(message)s"},
        "file": {"format": "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"},
        "verbose": {
            "format": "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "console",
            "stream": sys.stdout,
        },
        "throttle_file": {
            "level": "WARNING",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "filename": str(THROTTLE_LOG_PATH),
            "maxBytes": 1_000_000,
            "backupCount": 10,
        },
        "info_file": {
            "level": "INFO",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "filename": str(INFO_LOG_PATH),
            "maxBytes": 1_000_000,
            "backupCount": 10,
        },
        "error_file": {
            "level": "ERROR",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "filename": str(ERROR_LOG_PATH),
            "maxBytes": 1_000_000,
            "backupCount": 10,
        },
        **{
            f"{short_name}_performance_file": {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": str(path),
                "formatter": "file",
                "maxBytes": 10 * 1024 * 1024,
                "backupCount": 5,
                "level": "INFO",
            }
            for short_name, path in PERFORMANCE_LOG_PATHS.items()
        },
        "monitoring_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(MONITORING_LOG_PATH),
            "formatter": "file",
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "level": "INFO",
        },
        "notification_file": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(NOTIFICATION_LOG_PATH),
            "formatter": "verbose",
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "level": "INFO",
        },
    },
    "loggers": {
        # root logger
        "": {
            "level": "INFO",
            "handlers": ["console", "info_file", "error_file"],
            "propagate": True,
        },
        "apps.core.throttle": {
            "handlers": ["throttle_file"],
            "level": "INFO",
            "propagate": True,
        },
        **{
            f"{short_name}_performance": {
                "handlers": [f"{short_name}_performance_file"],
                "level": "INFO",
                "propagate": False,
            }
            for short_name in PERFORMANCE_API_PREFIXES.values()
        },
        "monitoring": {
            "handlers": ["monitoring_file"],
            "level": "INFO",
            "propagate": False,
        },
        "notifications": {
            "handlers": ["notification_file", "error_file"],
            "level": "INFO",
            "propagate": False,
        },
    },
}

# Without file logging, drop all file handlers and route everything to console
if not USE_FILE_LOGGING:
    for h in list(LOGGING["handlers"].keys()):
        if h.endswith("_file"):
            LOGGING["handlers"].pop(h, None)

    for logger_config in LOGGING["loggers"].values():
        logger_config["handlers"] = ["console"]
