"""
EMVCo merchant-presented QR helpers: TLV parsing and CRC-16 validation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Union

CRC_MARKER = "6304"
CRC_ENCODINGS = ("hex", "ascii")
TEMPLATE_TAGS = frozenset({"26", "27", "28", "29", "30", "31", "32"})

TAG_NAMES = {
    "00": "Payload Format Indicator",
    "01": "Point of Initiation Method",
    "26": "Merchant Account Information",
    "29": "Merchant Account Information (PromptPay)",
    "30": "Merchant Account Information (Bill Payment)",
    "52": "Merchant Category Code",
    "53": "Transaction Currency",
    "54": "Transaction Amount",
    "58": "Country Code",
    "59": "Merchant Name",
    "60": "Merchant City",
    "62": "Additional Data Field Template",
    "63": "CRC",
}

_HEX_RE = re.compile(r"[0-9A-Fa-f]*")


class TLVFormatError(ValueError):
    """Raised when a TLV length field is not a two-digit decimal number."""


@dataclass(frozen=True)
class Primitive:
    tag: str
    value: str


@dataclass(frozen=True)
class Template:
    """Composite field. Unhashable, since ``sub`` is a plain dict."""

    tag: str
    raw: str
    sub: Dict[str, "TLVNode"] = field(default_factory=dict)

    __hash__ = None  # type: ignore[assignment]

    @property
    def value(self) -> str:
        return self.raw


TLVNode = Union[Primitive, Template]


@dataclass(frozen=True)
class CRCResult:
    ok: bool
    expected: str | None
    actual: str | None


def describe(tag: str) -> str:
    return TAG_NAMES.get(tag, "Unknown Tag")


def tlv(tag: str, value: str) -> str:
    """Encode a single field as tag + two-digit length + value."""
    if len(tag) != 2:
        raise ValueError(f"TLV tag must be 2 characters, got {tag!r}")
    if len(value) > 99:
        raise ValueError(f"TLV value for tag {tag} is longer than 99 characters")
    return f"{tag}{len(value):02d}{value}"


def parse_emv(payload: str) -> Dict[str, TLVNode]:
    """Parse an EMVCo TLV string into a mapping of tag -> node.

    Values shorter than their declared length are kept as-is. Tags 26-32 are
    merchant account templates and are parsed recursively. A repeated tag
    replaces the earlier one.
    """
    out: Dict[str, TLVNode] = {}
    i = 0
    while i < len(payload):
        if len(payload) - i < 4:
            # trailing fragment cannot hold tag + length
            break
        tag = payload[i : i + 2]
        length_text = payload[i + 2 : i + 4]
        if not length_text.isdigit() or not length_text.isascii():
            raise TLVFormatError(f"Invalid length {length_text!r} for tag {tag!r} at offset {i}")
        length = int(length_text)
        i += 4
        value = payload[i : i + length]
        i += length

        if tag in TEMPLATE_TAGS:
            out[tag] = Template(tag=tag, raw=value, sub=parse_emv(value))
        else:
            out[tag] = Primitive(tag=tag, value=value)
    return out


def crc16_ccitt(data: bytes) -> int:
    """CRC-16/CCITT-FALSE: poly 0x1021, init 0xFFFF, no final XOR."""
    polynomial = 0x1021
    crc = 0xFFFF
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = (crc << 1) ^ polynomial
            else:
                crc <<= 1
            crc &= 0xFFFF
    return crc


def _checksum_bytes(text: str, encoding: str) -> bytes | None:
    if encoding == "hex":
        if len(text) % 2 or not _HEX_RE.fullmatch(text):
            return None
        return bytes.fromhex(text)
    if encoding == "ascii":
        if not text.isascii():
            return None
        return text.encode("ascii")
    raise ValueError(f"Unsupported CRC encoding: {encoding!r}")


def checksum(text: str, encoding: str = "hex") -> str | None:
    data = _checksum_bytes(text, encoding)
    if data is None:
        return None
    return f"{crc16_ccitt(data):04X}"


def append_crc(body: str, encoding: str = "hex") -> str:
    """Append the CRC field (tag 63) to a payload body."""
    data = body + CRC_MARKER
    crc = checksum(data, encoding)
    if crc is None:
        raise ValueError(f"Payload body cannot be checksummed as {encoding}")
    return data + crc


def verify_crc(payload: str, encoding: str = "hex") -> CRCResult:
    """Recompute the CRC up to and including the first 6304 marker.

    Never raises for malformed payloads; anything that cannot be checked is
    reported as not ok.
    """
    if encoding not in CRC_ENCODINGS:
        raise ValueError(f"Unsupported CRC encoding: {encoding!r}")
    idx = payload.find(CRC_MARKER)
    if idx < 0:
        return CRCResult(ok=False, expected=None, actual=None)

    data_no_crc = payload[: idx + len(CRC_MARKER)]
    actual = payload[idx + 4 : idx + 8].upper()
    expected = checksum(data_no_crc, encoding)
    if expected is None:
        return CRCResult(ok=False, expected=None, actual=actual)
    return CRCResult(ok=expected == actual, expected=expected, actual=actual)
