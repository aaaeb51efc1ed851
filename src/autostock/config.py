"""Environment-based configuration."""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from autostock.ai.analysis import DEFAULT_MODEL

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Config:
    """Runtime settings read from the environment.

    Attributes:
        db_url: SQLAlchemy URL of the backend (None uses the default file)
        user_id: User the session is opened for (None means logged out)
        openai_api_key: Key for product analysis (None disables it)
        openai_model: Chat model used for product analysis
        log_level: Name of the root log level
    """

    db_url: Optional[str] = None
    user_id: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_MODEL
    log_level: str = "WARNING"


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a Config from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    return Config(
        db_url=env.get("AUTOSTOCK_DB_URL") or None,
        user_id=env.get("AUTOSTOCK_USER") or None,
        openai_api_key=env.get("AUTOSTOCK_OPENAI_API_KEY") or env.get("OPENAI_API_KEY") or None,
        openai_model=env.get("AUTOSTOCK_OPENAI_MODEL") or DEFAULT_MODEL,
        log_level=(env.get("AUTOSTOCK_LOG_LEVEL") or "WARNING").upper(),
    )


def configure_logging(level: str = "WARNING") -> None:
    """Send log records to stderr at ``level``."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
