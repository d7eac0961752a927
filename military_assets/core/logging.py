import logging
import sys
from logging.config import dictConfig

from military_assets.core.config import APP_ENV, LOG_LEVEL

ACCESS_LOGGER = "military_assets.access"
LEDGER_LOGGER = "military_assets.ledger"


class RequestContextFilter(logging.Filter):
    """Fill the access-record fields so the access format never raises KeyError."""

    FIELDS = {
        "client_addr": "-",
        "method": "-",
        "path": "-",
        "status_code": "-",
        "process_time_ms": "-",
        "user_id": "anonymous",
        "request_id": "-",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        for field, default in self.FIELDS.items():
            if getattr(record, field, None) is None:
                setattr(record, field, default)
        return True


def setup_logging():
    level = LOG_LEVEL or ("DEBUG" if APP_ENV == "development" else "INFO")

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {
                "request_context": {"()": RequestContextFilter},
            },
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                },
                "access": {
                    "format": (
                        "%(asctime)s | ACCESS | %(request_id)s | %(client_addr)s | "
                        "user=%(user_id)s | %(method)s %(path)s | "
                        "%(status_code)s | %(process_time_ms)sms"
                    ),
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
                "access_console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "access",
                    "filters": ["request_context"],
                },
            },
            "loggers": {
                ACCESS_LOGGER: {
                    "handlers": ["access_console"],
                    "level": "INFO",
                    "propagate": False,
                },
                # ledger mutations stay at INFO even when the root is quieter
                LEDGER_LOGGER: {"level": "INFO"},
                "apscheduler": {"level": "WARNING"},
                "sqlalchemy.engine": {"level": "WARNING"},
            },
            "root": {
                "level": level,
                "handlers": ["console"],
            },
        }
    )
