from __future__ import annotations

import logging

from newsdigest.core.config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(settings: Settings) -> None:
    level = settings.log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # serverless hosts install a root handler before our code runs
    logging.getLogger().setLevel(level)
