"""Central logging configuration for the harvest CLI."""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Optional


_CONFIGURED = False


def configure_logging(default_level: Optional[str] = None) -> None:
    """Send log records to stderr so stdout stays reserved for the JSON document.

    The first call installs the handler; later calls only adjust the level.
    """

    global _CONFIGURED
    level_name = (default_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    if _CONFIGURED:
        logging.getLogger().setLevel(level_name)
        return

    formatter = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": formatter,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                }
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stderr",
                }
            },
            "root": {
                "level": level_name,
                "handlers": ["stderr"],
            },
            "loggers": {
                # pydicom warns loudly about every non-conformant file
                "pydicom": {
                    "level": "ERROR",
                },
            },
        }
    )

    _CONFIGURED = True
