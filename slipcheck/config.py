from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .verification import AMOUNT_TOLERANCE, PAYLOAD_FORMATS


@dataclass(frozen=True)
class Settings:
    promptpay_id: str | None = None
    amount_tolerance: float = AMOUNT_TOLERANCE
    payload_format: str = "auto"
    log_level: str = "INFO"


def load_settings(load_env_file: bool = True) -> Settings:
    """Read slip verification settings from the environment (and .env)."""
    if load_env_file:
        load_dotenv()

    promptpay_id = (os.getenv("PROMPTPAY_ID") or "").strip() or None

    raw_tolerance = os.getenv("SLIP_AMOUNT_TOLERANCE", str(AMOUNT_TOLERANCE))
    try:
        tolerance = float(raw_tolerance)
    except ValueError:
        raise ValueError(f"SLIP_AMOUNT_TOLERANCE must be a number, got {raw_tolerance!r}") from None
    if tolerance < 0:
        raise ValueError("SLIP_AMOUNT_TOLERANCE cannot be negative")

    payload_format = os.getenv("SLIP_PAYLOAD_FORMAT", "auto").strip().lower()
    if payload_format not in PAYLOAD_FORMATS:
        raise ValueError(
            f"SLIP_PAYLOAD_FORMAT should be one of {', '.join(PAYLOAD_FORMATS)}, got {payload_format!r}"
        )

    return Settings(
        promptpay_id=promptpay_id,
        amount_tolerance=tolerance,
        payload_format=payload_format,
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
    )
