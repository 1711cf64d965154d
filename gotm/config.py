"""Runtime settings, read once from the environment at import time."""

import logging
import os

# Results are recomputed at most once per hour unless a ballot changes.
CACHE_TTL_SECONDS = int(os.environ.get("GOTM_CACHE_TTL_SECONDS", "3600"))

FETCH_TIMEOUT_SECONDS = float(os.environ.get("GOTM_FETCH_TIMEOUT_SECONDS", "30.0"))

LOG_LEVEL = os.environ.get("GOTM_LOG_LEVEL", "INFO").upper()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for scripts and the serverless handler."""
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
