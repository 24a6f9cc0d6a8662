"""Generate a PromptPay payment QR code that slips can be verified against."""

from __future__ import annotations

import argparse

from slipcheck.promptpay import build_promptpay_payload, normalize_target, save_qr_image


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="สร้าง PromptPay QR Code สำหรับการชำระเงิน"
    )
    parser.add_argument(
        "--target",
        required=True,
        help="หมายเลข PromptPay (เบอร์มือถือ 10 หลัก หรือเลขประจำตัว 13 หลัก)",
    )
    parser.add_argument(
        "--amount",
        type=float,
        default=None,
        help="กำหนดจำนวนเงินตายตัว (THB) ถ้าไม่ใส่ ลูกค้ากรอกเองได้",
    )
    parser.add_argument("--name", default=None, help="ชื่อร้านค้า (ไม่เกิน 25 ตัวอักษร)")
    parser.add_argument("--city", default=None, help="เมือง (ไม่เกิน 15 ตัวอักษร)")
    parser.add_argument(
        "--output",
        default="qr_codes/promptpay.png",
        help="ตำแหน่งไฟล์ปลายทาง",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    target = normalize_target(args.target)
    payload = build_promptpay_payload(target, args.amount, merchant_name=args.name, city=args.city)

    output_path = save_qr_image(payload, args.output)
    print(payload)
    print(f"สร้าง QR พร้อมเพย์สำหรับ {target} -> {output_path}")


if __name__ == "__main__":
    main()
