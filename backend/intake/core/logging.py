import logging.config
from typing import Optional

# Loggers of the upload and JSON pipelines; their rejections are logged at
# INFO and can be tuned apart from the HTTP layer.
PIPELINE_LOGGERS = ("intake.services.uploads", "intake.services.json_body")


def configure_logging(level: str = "INFO", pipeline_level: Optional[str] = None) -> None:
    pipeline_level = pipeline_level or level
    loggers = {
        "intake": {"level": level, "propagate": True},
        "uvicorn": {"level": level, "handlers": ["console"], "propagate": False},
        "uvicorn.error": {"level": level, "handlers": ["console"], "propagate": False},
        "uvicorn.access": {"level": level, "handlers": ["access"], "propagate": False},
    }
    for name in PIPELINE_LOGGERS:
        # records reach the root console handler whatever the root level
        loggers[name] = {"level": pipeline_level, "propagate": True}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": "%(asctime)s %(levelname)s %(name)s - %(message)s"},
                "access": {"format": "%(asctime)s ACCESS %(message)s"},
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "default"},
                "access": {"class": "logging.StreamHandler", "formatter": "access"},
            },
            "root": {"level": "WARNING", "handlers": ["console"]},
            "loggers": loggers,
        }
    )
