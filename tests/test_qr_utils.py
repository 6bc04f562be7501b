import io

import pytest
from PIL import Image

from railtrack.errors import EncodingError
from railtrack.qr_utils import encode_data_url, encode_png, to_data_url

from conftest import decodes_to

URL = "http://localhost:5000/uploads/railway-item-1705312800000.pdf"


def test_png_has_requested_width():
    img = Image.open(io.BytesIO(encode_png(URL, width=200, margin=2)))
    assert img.format == "PNG"
    assert img.size == (200, 200)


def test_encoding_is_deterministic():
    assert encode_png(URL) == encode_png(URL)
    assert encode_png(URL, width=300, dark="#000000", light="#FFFFFF") == \
        encode_png(URL, width=300, dark="#000000", light="#FFFFFF")


def test_encoded_modules_match_payload():
    assert decodes_to(encode_png(URL, width=200, margin=2), URL)
    assert not decodes_to(encode_png(URL + "x", width=200, margin=2), URL)


def test_margin_is_light():
    img = Image.open(io.BytesIO(encode_png(URL, width=200, margin=2))).convert("L")
    assert img.getpixel((0, 0)) > 128
    assert img.getpixel((199, 199)) > 128


def test_oversized_payload_is_rejected():
    # Version 40-M holds 2331 bytes.
    with pytest.raises(EncodingError) as exc:
        encode_png("x" * 2332, error_correction="M")
    assert "exceeds QR capacity" in str(exc.value)
    assert encode_png("x" * 2331, error_correction="M")


def test_capacity_depends_on_error_correction():
    payload = "x" * 1500
    assert encode_png(payload, error_correction="L")
    with pytest.raises(EncodingError):
        encode_png(payload, error_correction="H")


@pytest.mark.parametrize("kwargs", [{"width": 0}, {"margin": -1}, {"error_correction": "Z"}])
def test_invalid_options(kwargs):
    with pytest.raises(EncodingError):
        encode_png(URL, **kwargs)


def test_empty_payload():
    with pytest.raises(EncodingError):
        encode_png("")


def test_data_url():
    png = encode_png(URL)
    assert to_data_url(png).startswith("data:image/png;base64,")
    assert encode_data_url(URL) == to_data_url(png)
