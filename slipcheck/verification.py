"""
Payment-slip verification policy.

Combines the EMVCo CRC check and TLV parse of a decoded slip QR with the
expected receiver account, amount and currency. The result is only a hint for
the checkout flow: anything that does not verify cleanly goes to REVIEW so a
person can look at the slip.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping

from .emvco import Primitive, Template, TLVNode, parse_emv, verify_crc

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.01
ACCEPTED_CURRENCIES = frozenset({"TH", "THB", "764"})
MERCHANT_TEMPLATE_TAGS = ("29", "26")
PAYLOAD_FORMATS = ("auto", "hex", "emv")

REASON_INVALID = "QR not found or invalid"
REASON_DECODE_ERROR = "QR decode error"
REASON_NO_SLIP = "No slip attached"

_HEX_PAYLOAD_RE = re.compile(r"[0-9A-F]+", re.IGNORECASE)
_EMV_PAYLOAD_RE = re.compile(r"[ -~]+")
_AMOUNT_RE = re.compile(r"[0-9]+(\.[0-9]+)?")


class SlipStatus(str, Enum):
    VERIFIED_PRELIM = "VERIFIED_PRELIM"
    REVIEW = "REVIEW"


@dataclass(frozen=True)
class SlipChecks:
    crc: bool
    account_matches: bool
    amount_matches: bool
    currency: str
    currency_matches: bool

    @property
    def passed(self) -> bool:
        return self.crc and self.account_matches and self.amount_matches and self.currency_matches

    def to_reason(self) -> str:
        return json.dumps(
            {
                "crc": self.crc,
                "accountMatches": self.account_matches,
                "amountMatches": self.amount_matches,
                "currency": self.currency,
            },
            separators=(",", ":"),
        )


@dataclass(frozen=True)
class Verdict:
    status: SlipStatus
    reason: str | None = None
    checks: SlipChecks | None = None

    @classmethod
    def review(cls, reason: str, checks: SlipChecks | None = None) -> "Verdict":
        return cls(status=SlipStatus.REVIEW, reason=reason, checks=checks)

    @property
    def verified(self) -> bool:
        return self.status is SlipStatus.VERIFIED_PRELIM

    def audit_note(self) -> str:
        """Short annotation for the order activity log."""
        if self.reason:
            return f"slip={self.status.value}|{self.reason}"
        return f"slip={self.status.value}"


def payload_encoding(payload: object, payload_format: str = "auto") -> str | None:
    """Return the CRC encoding to use for ``payload``, or None if its shape is invalid.

    ``hex`` payloads consist only of hexadecimal digits and are checksummed
    two characters per byte. ``emv`` payloads may hold any printable ASCII
    and are checksummed over their character bytes. ``auto`` picks ``hex``
    whenever the payload qualifies for it.
    """
    if payload_format not in PAYLOAD_FORMATS:
        raise ValueError(f"Unknown payload format: {payload_format!r}")
    if not payload or not isinstance(payload, str):
        return None
    if payload_format in ("auto", "hex") and _HEX_PAYLOAD_RE.fullmatch(payload):
        return "hex"
    if payload_format in ("auto", "emv") and _EMV_PAYLOAD_RE.fullmatch(payload):
        return "ascii"
    return None


def merchant_template(fields: Mapping[str, TLVNode]) -> Dict[str, TLVNode] | None:
    # PromptPay issuers use tag 29, others put the account under 26.
    for tag in MERCHANT_TEMPLATE_TAGS:
        node = fields.get(tag)
        if isinstance(node, Template):
            return node.sub
    return None


def account_matches(template: Mapping[str, TLVNode] | None, expected_account_id: str | None) -> bool:
    if not expected_account_id:
        return True
    if not template:
        return False
    return any(
        isinstance(node, Primitive) and expected_account_id in node.value
        for node in template.values()
    )


def _field_value(fields: Mapping[str, TLVNode], tag: str) -> str:
    node = fields.get(tag)
    return node.value if node is not None else ""


def amount_matches(
    fields: Mapping[str, TLVNode],
    expected_amount: float,
    tolerance: float = AMOUNT_TOLERANCE,
) -> bool:
    raw_amount = _field_value(fields, "54")
    if not raw_amount:
        return True
    if not _AMOUNT_RE.fullmatch(raw_amount):
        return False
    return abs(float(raw_amount) - float(expected_amount)) < tolerance


def currency_matches(currency: str | None) -> bool:
    if not currency:
        return True
    return currency.upper() in ACCEPTED_CURRENCIES


def verify_slip(
    payload: str | None,
    expected_account_id: str | None,
    expected_amount: float,
    *,
    tolerance: float = AMOUNT_TOLERANCE,
    payload_format: str = "auto",
) -> Verdict:
    """Classify a decoded slip payload as VERIFIED_PRELIM or REVIEW.

    Missing amount, currency or account fields do not fail verification;
    only a present field that disagrees does. Never raises for bad payloads.
    """
    encoding = payload_encoding(payload, payload_format)
    if encoding is None:
        return Verdict.review(REASON_INVALID)

    try:
        crc = verify_crc(payload, encoding)
        fields = parse_emv(payload)
        template = merchant_template(fields)
        currency = _field_value(fields, "58").upper()
        checks = SlipChecks(
            crc=crc.ok,
            account_matches=account_matches(template, expected_account_id),
            amount_matches=amount_matches(fields, expected_amount, tolerance),
            currency=currency,
            currency_matches=currency_matches(currency),
        )
    except Exception as exc:
        logger.warning("Failed to evaluate slip payload: %s", exc)
        return Verdict.review(REASON_DECODE_ERROR)

    if checks.passed:
        return Verdict(status=SlipStatus.VERIFIED_PRELIM, checks=checks)

    logger.info("Slip needs review: %s", checks.to_reason())
    return Verdict.review(checks.to_reason(), checks)
