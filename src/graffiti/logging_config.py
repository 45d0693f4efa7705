import logging
import logging.config
import os
import sys

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.getenv("LOG_FILE", "/tmp/graffiti.log")

HANDLERS = ["console", "file"]

# One INFO line per HTTP request or poll otherwise
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")
QUIET = {"level": "WARNING", "handlers": HANDLERS, "propagate": False}


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "bot": {
            "format": "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s",
            "datefmt": "%H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "bot",
            "stream": sys.stdout,
        },
        "file": {
            "class": "logging.FileHandler",
            "formatter": "bot",
            "filename": LOG_FILE,
            "mode": "a",
        },
    },
    "loggers": {
        "graffiti": {"level": LOG_LEVEL, "handlers": HANDLERS, "propagate": False},
        **{name: dict(QUIET) for name in QUIET_LOGGERS},
    },
    "root": {"level": "WARNING", "handlers": HANDLERS},
}


def setup_logging():
    """Route ``graffiti.*`` to stdout and the log file; keep HTTP chatter at WARNING."""
    logging.config.dictConfig(LOGGING_CONFIG)
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
