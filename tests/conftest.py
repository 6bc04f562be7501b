import base64
import io
import re
import zlib

import pytest
import qrcode
from PIL import Image

from railtrack import create_app
from railtrack.qr_utils import ERROR_CORRECTION


@pytest.fixture()
def app(tmp_path):
    return create_app(testing=True, config={"UPLOAD_FOLDER": str(tmp_path / "uploads")})


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def upload_dir(app):
    return app.config["UPLOAD_FOLDER"]


def png_from_data_url(data_url):
    header, b64 = data_url.split(",", 1)
    assert header == "data:image/png;base64"
    return base64.b64decode(b64)


def expected_matrix(payload, margin=2, level="M"):
    qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECTION[level], box_size=1, border=margin)
    qr.add_data(payload)
    qr.make(fit=True)
    return qr.get_matrix()


def matrix_from_png(png, modules):
    """Sample the centre of every module of a scaled QR image."""
    img = png if isinstance(png, Image.Image) else Image.open(io.BytesIO(png))
    img = img.convert("L")
    width, _ = img.size
    rows = []
    for r in range(modules):
        y = int((r + 0.5) * width / modules)
        rows.append([img.getpixel((int((c + 0.5) * width / modules), y)) < 128 for c in range(modules)])
    return rows


def decodes_to(png, payload, margin=2, level="M"):
    expected = expected_matrix(payload, margin, level)
    return matrix_from_png(png, len(expected)) == expected


def embedded_images(pdf):
    """Decode every image XObject stored in ``pdf``."""
    images = []
    for obj in pdf.split(b"endobj"):
        if b"/Subtype /Image" not in obj or b"stream" not in obj:
            continue
        start = obj.index(b"stream")
        head, body = obj[:start], obj[start + len(b"stream"):obj.rindex(b"endstream")]
        data = body.strip() if b"/ASCII85Decode" in head else body.lstrip(b"\r\n")
        if b"/ASCII85Decode" in head:
            data = base64.a85decode(data, adobe=True)
        if b"/FlateDecode" in head:
            data = zlib.decompressobj().decompress(data)
        width = int(re.search(rb"/Width (\d+)", head).group(1))
        height = int(re.search(rb"/Height (\d+)", head).group(1))
        mode = "L" if b"/DeviceGray" in head else "RGB"
        images.append(Image.frombytes(mode, (width, height), data))
    return images
