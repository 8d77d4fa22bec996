# barberbook/utils/my_logging.py
"""Process-wide logging for the booking API"""
import logging
import sys
from typing import Dict, Optional

from barberbook.config.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

# Third-party loggers and the level they are held at
THIRD_PARTY_LEVELS: Dict[str, int] = {
    # discovery_cache warns on every client build when oauth2client is absent
    "googleapiclient.discovery_cache": logging.ERROR,
    "googleapiclient.discovery": logging.WARNING,
    "google_auth_oauthlib.flow": logging.WARNING,
    "google.auth.transport.requests": logging.WARNING,
    "urllib3.connectionpool": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "alembic.runtime.migration": logging.WARNING,
}


def setup_logging(level: Optional[str] = None) -> None:
    """
    Log to stdout at `level` (LOG_LEVEL by default).

    With DEBUG on, SQLAlchemy statements are logged too.
    """
    settings = get_settings()
    level_name = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    for name, third_party_level in THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(third_party_level)

    if settings.DEBUG:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
