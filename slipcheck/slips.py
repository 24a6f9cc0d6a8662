from __future__ import annotations

import logging
from pathlib import Path

from .config import Settings
from .decode_qr import decode_qr
from .verification import REASON_NO_SLIP, Verdict, verify_slip

logger = logging.getLogger(__name__)


class SlipVerifier:
    """Checks transfer slips attached at checkout against the order total."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()

    def check_payload(self, payload: str | None, expected_amount: float) -> Verdict:
        return verify_slip(
            payload,
            self.settings.promptpay_id,
            expected_amount,
            tolerance=self.settings.amount_tolerance,
            payload_format=self.settings.payload_format,
        )

    def read_payload(self, slip_path: str | Path) -> str | None:
        """Return the QR text of a slip image, or None if it cannot be read."""
        try:
            return decode_qr(slip_path)
        except Exception as exc:
            logger.warning("Failed to decode QR from slip %s: %s", slip_path, exc)
            return None

    def assess(self, slip_path: str | Path | None, expected_amount: float) -> Verdict:
        """Decode the slip image at ``slip_path`` and verify its QR payload.

        A slip that cannot be read is treated as having no QR code; the order
        still goes through and is left for manual review.
        """
        if not slip_path:
            return Verdict.review(REASON_NO_SLIP)

        payload = self.read_payload(slip_path)
        verdict = self.check_payload(payload, expected_amount)
        logger.info("Slip %s for amount %.2f: %s", slip_path, expected_amount, verdict.audit_note())
        return verdict
