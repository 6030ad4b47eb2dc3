from __future__ import annotations

import json
from typing import IO, Optional

from PIL import Image, UnidentifiedImageError
from pyzbar.pyzbar import decode as pyzbar_decode

from ..core.exceptions import MalformedPayloadError, ValidationError


def parse_scan_payload(qr_data: Optional[str]) -> str:
    """Extract the volunteer id from a scanned QR payload.

    The payload is the JSON object printed on the badge, e.g.
    ``{"id": "...", "name": "...", "timestamp": "..."}``. Only ``id`` matters;
    ``volunteerId`` is accepted for badges printed by older clients.
    """
    if qr_data is None or not str(qr_data).strip():
        raise ValidationError("QR data is required")

    try:
        data = json.loads(qr_data)
    except (TypeError, ValueError):
        raise MalformedPayloadError("Invalid QR data format")

    if not isinstance(data, dict):
        raise MalformedPayloadError("Invalid QR data format")

    volunteer_id = data.get("id")
    if volunteer_id is None:
        volunteer_id = data.get("volunteerId")
    if volunteer_id is None or not str(volunteer_id).strip():
        raise ValidationError("Invalid QR data: missing volunteer ID")

    return str(volunteer_id).strip()


def decode_qr_image(stream: IO[bytes]) -> str:
    """Return the text of the first QR code found in an uploaded photo."""
    try:
        img = Image.open(stream)
        img.load()
    except (UnidentifiedImageError, OSError):
        raise ValidationError("Uploaded file is not a readable image")

    decoded = pyzbar_decode(img.convert("RGB"))
    for symbol in decoded:
        if symbol.type == "QRCODE":
            try:
                return symbol.data.decode("utf-8")
            except UnicodeDecodeError:
                raise MalformedPayloadError("Invalid QR data format")

    raise ValidationError("No QR code found in image")
