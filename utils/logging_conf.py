# utils/logging_conf.py
import logging
from logging.config import dictConfig
from .config import Config

def setup_logging(level=None):
    level = getattr(logging, (level or Config.LOG_LEVEL).upper(), logging.INFO)
    dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s"}
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"}
        },
        "loggers": {
            # aiohttp access/client chatter is noisy at INFO
            "aiohttp": {"level": "WARNING"},
        },
        "root": {"handlers": ["console"], "level": level}
    })
