"""Read the QR text embedded in an uploaded transfer slip image."""

from __future__ import annotations

from pathlib import Path

from PIL import Image


def decode_qr(file_path: str | Path) -> str:
    """Return the text of the first QR code found in the image, or "".

    Raises if the file cannot be opened as an image or zbar is unavailable.
    """
    # pyzbar needs the native zbar library, so only load it when decoding.
    from pyzbar.pyzbar import ZBarSymbol, decode

    with Image.open(file_path) as image:
        symbols = decode(image.convert("RGB"), symbols=[ZBarSymbol.QRCODE])

    for symbol in symbols:
        if symbol.data:
            return symbol.data.decode("utf-8", errors="replace").strip()
    return ""
