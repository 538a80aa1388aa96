from __future__ import annotations

from logging.config import dictConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single console handler on the root logger.

    uvicorn's own loggers keep their handlers; they only get the level.
    """
    level = level.upper()
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {
                "uvicorn": {"level": level},
                "uvicorn.access": {"level": level},
            },
        }
    )
