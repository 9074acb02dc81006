import logging
import sys
from logging import config as logging_config

AUDIT_LOGGER = "posevault.audit"
NOISY_LOGGERS = ("botocore", "boto3", "urllib3", "aiobotocore", "s3transfer")

LINE_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
ACCESS_FORMAT = "%(asctime)s %(levelname)-5s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Colors the level name on terminals; with ``use_colors=False`` it is a plain formatter."""

    LEVEL_COLORS = (
        (logging.CRITICAL, "\x1b[41m"),
        (logging.ERROR, "\x1b[31m"),
        (logging.WARNING, "\x1b[33m"),
        (logging.INFO, "\x1b[32m"),
        (logging.DEBUG, "\x1b[36m"),
    )
    RESET = "\x1b[0m"

    def __init__(self, fmt: str | None = None, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_colors = use_colors

    def color_for(self, levelno: int) -> str:
        for threshold, color in self.LEVEL_COLORS:
            if levelno >= threshold:
                return color
        return ""

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)
        levelname = record.levelname
        record.levelname = f"{self.color_for(record.levelno)}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def build_logging_config(level: str = "INFO", use_colors: bool = False, audit_level: str = "INFO") -> dict:
    """dictConfig payload for the API process and the Celery worker.

    Share audit events (``posevault.audit``) keep their own level so they are
    still written when the rest of the app logs only warnings.
    """

    def formatter(fmt: str) -> dict:
        return {"()": ColoredFormatter, "fmt": fmt, "datefmt": DATE_FORMAT, "use_colors": use_colors}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": formatter(LINE_FORMAT), "access": formatter(ACCESS_FORMAT)},
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": "ext://sys.stdout"},
            "access": {"class": "logging.StreamHandler", "formatter": "access", "stream": "ext://sys.stdout"},
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
            "celery": {"handlers": ["default"], "level": level, "propagate": False},
            AUDIT_LOGGER: {"level": audit_level},
            **{name: {"level": "WARNING"} for name in NOISY_LOGGERS},
        },
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(level: str = "INFO", use_colors: bool | None = None) -> None:
    """Configure process logging on stdout; colors only when stdout is a terminal."""
    if use_colors is None:
        use_colors = sys.stdout.isatty()
    logging_config.dictConfig(build_logging_config(level, use_colors=use_colors))


__all__ = ["AUDIT_LOGGER", "ColoredFormatter", "build_logging_config", "configure_logging"]
