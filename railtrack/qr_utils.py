"""QR code generation for certificates and ad hoc links.

This module centralises QR code generation so the PDF compositor and the
standalone ``/api/generate-qr`` endpoint produce identical codes for the same
input.  Images are rendered in memory and returned as PNG bytes; nothing here
touches the filesystem.  Output is deterministic: the same payload and options
always give byte-identical PNGs.
"""

import base64
from io import BytesIO

import qrcode
import qrcode.constants
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage
from PIL import Image

from .errors import EncodingError

ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


def encode_png(
    payload: str,
    width: int = 200,
    margin: int = 2,
    dark: str = "#000000",
    light: str = "#FFFFFF",
    error_correction: str = "M",
) -> bytes:
    """Encode ``payload`` into a square PNG ``width`` pixels wide.

    ``margin`` is the quiet zone in modules.  The smallest QR version that
    fits the payload is chosen; a payload too long for version 40 at the
    requested error correction level raises :class:`EncodingError` instead of
    being truncated.
    """

    if not payload:
        raise EncodingError("Cannot encode an empty payload")
    if width <= 0 or margin < 0:
        raise EncodingError(f"Invalid QR geometry: width={width}, margin={margin}")
    if error_correction not in ERROR_CORRECTION:
        raise EncodingError(f"Unknown error correction level: {error_correction}")

    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECTION[error_correction],
        box_size=1,
        border=margin,
    )
    qr.add_data(payload)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        # qrcode 8 reports overflow as "Invalid version (was 41 ...)".
        raise EncodingError(
            f"Payload of {len(payload)} characters exceeds QR capacity "
            f"at error correction level {error_correction}"
        ) from e

    try:
        img = qr.make_image(image_factory=PilImage, fill_color=dark, back_color=light)
    except ValueError as e:
        raise EncodingError(f"Invalid QR colours: {dark!r} on {light!r}") from e

    # Scale the one-pixel-per-module image up to the requested width.
    scaled = img.get_image().resize((width, width), Image.NEAREST)
    buf = BytesIO()
    scaled.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def encode_data_url(payload: str, **opts) -> str:
    """Encode ``payload`` and return it inline as a ``data:`` URL."""

    return to_data_url(encode_png(payload, **opts))
