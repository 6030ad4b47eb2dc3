from __future__ import annotations

import base64
import io
import json
from datetime import datetime

import qrcode
from qrcode.constants import ERROR_CORRECT_H

from ..common.datetime_utils import to_iso
from ..core.constants import QR_DEFAULT_BORDER, QR_DEFAULT_BOX_SIZE


def build_payload(*, volunteer_id: str, name: str, issued_at: datetime) -> str:
    """JSON text encoded into a volunteer's badge; scanners only rely on ``id``."""
    return json.dumps({"id": volunteer_id, "name": name, "timestamp": to_iso(issued_at)})


def render_png(data: str, *, box_size: int = QR_DEFAULT_BOX_SIZE, border: int = QR_DEFAULT_BORDER) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
