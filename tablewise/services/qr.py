"""
Table QR codes linking to a restaurant's customer menu.
"""

import base64
import io
from typing import Optional
from urllib.parse import urlencode

import qrcode

from .. import config
from ..models import Restaurant


def menu_url(restaurant: Restaurant, table_number: Optional[str] = None) -> str:
    """Customer menu URL, optionally pre-filled with a table number."""
    url = f"{config.PUBLIC_MENU_BASE_URL}/r/{restaurant.slug}"
    if table_number:
        url += "?" + urlencode({"table": table_number})
    return url


def qr_data_url(data: str) -> str:
    """Encode ``data`` as a QR code and return it as a base64 PNG data URL."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{encoded}"
