"""Check a transfer slip image (or raw QR text) against an expected payment."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from slipcheck import create_verifier
from slipcheck.emvco import Template, TLVFormatError, describe, parse_emv


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="ตรวจสลิปโอนเงินจาก QR ในรูปภาพหรือข้อความ QR"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--image", help="ไฟล์รูปสลิปที่มี QR")
    source.add_argument("--payload", help="ข้อความ QR ที่ถอดแล้ว")
    parser.add_argument(
        "--amount",
        type=float,
        required=True,
        help="ยอดที่ต้องชำระ (THB)",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="แสดงรายการ field ของ QR",
    )
    return parser.parse_args()


def print_fields(fields, indent: str = "") -> None:
    for tag, node in fields.items():
        if isinstance(node, Template):
            print(f"{indent}{tag} | {describe(tag)}")
            print_fields(node.sub, indent + f"{tag}.")
        else:
            label = describe(tag) if not indent else ""
            print(f"{indent}{tag} | {label:40} | {node.value}")


def dump_payload(payload: str | None) -> None:
    if not payload:
        print("[!] No QR payload found.")
        return
    try:
        print_fields(parse_emv(payload))
    except TLVFormatError as exc:
        print(f"[!] Cannot parse payload: {exc}")


def main() -> int:
    args = parse_args()
    verifier = create_verifier()

    if args.image:
        if not Path(args.image).exists():
            print(f"[!] Error: Slip image '{args.image}' not found.")
            return 1
        payload = verifier.read_payload(args.image)
    else:
        payload = args.payload

    verdict = verifier.check_payload(payload, args.amount)
    if args.dump:
        dump_payload(payload)

    print(verdict.audit_note())
    return 0 if verdict.verified else 2


if __name__ == "__main__":
    sys.exit(main())
