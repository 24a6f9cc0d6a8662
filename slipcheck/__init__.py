from __future__ import annotations

import logging

from .config import Settings, load_settings
from .slips import SlipVerifier
from .verification import SlipStatus, Verdict, verify_slip

__all__ = [
    "Settings",
    "SlipStatus",
    "SlipVerifier",
    "Verdict",
    "configure_logging",
    "create_verifier",
    "load_settings",
    "verify_slip",
]


def configure_logging(level: str = "INFO") -> None:
    logger = logging.getLogger(__name__)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        logger.addHandler(handler)


def create_verifier(settings: Settings | None = None) -> SlipVerifier:
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)
    return SlipVerifier(settings)
