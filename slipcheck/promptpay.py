"""
Utilities for building PromptPay QR payloads that slips are checked against.
"""

from __future__ import annotations

import base64
from io import BytesIO
from pathlib import Path

import qrcode

from .emvco import append_crc, tlv

PROMPTPAY_AID = "A000000677010111"
THB_NUMERIC = "764"


def normalize_target(raw: str) -> str:
    """Normalize PromptPay target (phone number) into required numeric format."""
    digits = "".join(ch for ch in raw if ch.isdigit())
    if len(digits) == 10 and digits.startswith("0"):
        digits = "0066" + digits[1:]
    if len(digits) not in (13, 15):
        raise ValueError("PromptPay target should be 10-digit phone or 13/15-digit ID")
    return digits


def _target_subtag(target: str) -> str:
    # 01 = mobile number, 02 = national/tax ID, 03 = e-wallet ID
    if len(target) == 15:
        return "03"
    if target.startswith("0066"):
        return "01"
    return "02"


def build_promptpay_payload(
    target: str,
    amount: float | None = None,
    merchant_name: str | None = None,
    city: str | None = None,
) -> str:
    """Build EMVCo payload for PromptPay with optional fixed amount."""
    merchant_account = tlv("00", PROMPTPAY_AID) + tlv(_target_subtag(target), target)

    payload = (
        tlv("00", "01")
        + tlv("01", "12" if amount else "11")
        + tlv("29", merchant_account)
        + tlv("53", THB_NUMERIC)
    )
    if amount is not None:
        payload += tlv("54", f"{amount:.2f}")
    payload += tlv("58", "TH")
    if merchant_name:
        payload += tlv("59", merchant_name[:25])
    if city:
        payload += tlv("60", city[:15])

    return append_crc(payload, encoding="ascii")


def _make_image(payload: str):
    qr = qrcode.QRCode(version=3, border=3)
    qr.add_data(payload)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white")


def generate_qr_base64(payload: str) -> str:
    """Return QR code image (PNG) as base64 data URI."""
    img = _make_image(payload)

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def save_qr_image(payload: str, output_path: str | Path) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    _make_image(payload).save(path)
    return path
